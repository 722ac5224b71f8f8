#!/usr/bin/env python3
"""
Tests for the ignorewalk command line interface
"""

import json

import pytest

from ignorewalk import cli
from ignorewalk.cli import IgnoreWalkCLI, default_ignore_files


@pytest.fixture
def project(tree):
    return tree({
        '.gitignore': '*.log\nbuild/\n',
        'main.py': '',
        'debug.log': '',
        'build/out.o': '',
        'docs/guide.md': '',
    })


def run_cli(*argv):
    return IgnoreWalkCLI().run(list(argv))


def test_no_command_prints_help(capsys):
    assert run_cli() == 0
    assert 'walk' in capsys.readouterr().out


def test_walk(project, capsys):
    assert run_cli('walk', str(project)) == 0
    lines = capsys.readouterr().out.splitlines()
    assert sorted(lines) == ['.gitignore', 'docs/guide.md', 'main.py']


def test_walk_json(project, capsys):
    assert run_cli('walk', str(project), '--max-depth', '1', '--json') == 0
    records = [json.loads(line) for line in capsys.readouterr().out.splitlines()]
    assert {'path': 'docs', 'type': 'directory'} in records
    assert {'path': 'main.py', 'type': 'file'} in records


def test_walk_reports_truncation(project, capsys):
    assert run_cli('walk', str(project), '--max-entries', '1') == 0
    captured = capsys.readouterr()
    assert len(captured.out.splitlines()) == 1
    assert 'limited to 1' in captured.err


def test_walk_invalid_root(tmp_path, capsys):
    assert run_cli('walk', str(tmp_path / 'missing')) == 1
    assert 'Error:' in capsys.readouterr().err


def test_walk_custom_ignore_file(project, capsys):
    (project / '.ignore').write_text('*.py\n')
    assert run_cli('walk', str(project), '--ignore-file', '.ignore') == 0
    lines = capsys.readouterr().out.splitlines()
    assert 'main.py' not in lines
    assert 'debug.log' in lines


def test_ignore_files_from_environment(monkeypatch):
    monkeypatch.setenv('IGNOREWALK_IGNORE_FILES', '.ignore, .gitignore')
    assert default_ignore_files() == ['.ignore', '.gitignore']
    monkeypatch.setenv('IGNOREWALK_IGNORE_FILES', '')
    assert default_ignore_files() == ['.gitignore']


def test_ls_json(project, capsys):
    assert run_cli('ls', str(project), '--json') == 0
    data = json.loads(capsys.readouterr().out)
    assert sorted(item['name'] for item in data['content']) == ['.gitignore', 'docs', 'main.py']
    assert data['is_limited'] is False


@pytest.mark.parametrize('command', ['ls', 'tree'])
def test_limit_defaults_to_result_limit(command, monkeypatch):
    monkeypatch.setattr(cli, 'DEFAULT_RESULT_LIMIT', 7)
    args = IgnoreWalkCLI().build_parser().parse_args([command, '.'])
    assert args.limit == 7


def test_tree(project, capsys):
    assert run_cli('tree', str(project)) == 0
    assert capsys.readouterr().out.splitlines() == [
        '.gitignore',
        'docs',
        '  guide.md',
        'main.py',
    ]


def test_find(project, capsys):
    assert run_cli('find', r'\.md$', '--path', str(project)) == 0
    assert capsys.readouterr().out.splitlines() == ['docs/guide.md']


def test_find_without_matches(project):
    assert run_cli('find', r'\.rs$', '--path', str(project)) == 2


def test_find_invalid_regex(project, capsys):
    assert run_cli('find', '(', '--path', str(project)) == 1
    assert 'Invalid regex' in capsys.readouterr().err


def test_check(project, capsys):
    assert run_cli('check', '--root', str(project), str(project / 'debug.log')) == 0
    out = capsys.readouterr().out
    assert '*.log' in out
    assert 'ignored' in out


def test_check_not_ignored(project, capsys):
    assert run_cli('check', '--root', str(project), str(project / 'main.py')) == 1
    assert 'included' in capsys.readouterr().out
