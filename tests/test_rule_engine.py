#!/usr/bin/env python3
"""
Tests for pattern compilation and last-match-wins evaluation
"""

import pytest

from pathspec.patterns.gitignore.spec import GitIgnoreSpecPattern

from ignorewalk.constants import CASE_INSENSITIVE_PATHS
from ignorewalk.exceptions import InvalidPatternError
from ignorewalk.ignore.rule_engine import (
    IgnoreRuleEngine,
    is_within,
    normalize_path,
    relative_to_scope,
    trim_line,
)


@pytest.fixture
def engine():
    return IgnoreRuleEngine()


def matches(engine, pattern, path, is_directory=False, scope='/project'):
    rule = engine.compile_rule(scope, pattern)
    return rule.matches(path, is_directory)


def test_normalize_path():
    assert normalize_path('/a/b/') == '/a/b'
    assert normalize_path('/a/./b/../c') == '/a/c'
    assert normalize_path('/') == '/'


def test_is_within_respects_segment_boundaries():
    assert is_within('/a/b', '/a/b')
    assert is_within('/a/b/c', '/a/b')
    assert is_within('/a/b', '/')
    assert not is_within('/a/bc', '/a/b')


def test_trim_line():
    assert trim_line('  *.log  ') == '*.log'
    assert trim_line('foo\\ ') == 'foo\\ '
    assert trim_line('bar\t\r') == 'bar'


def test_relative_to_scope():
    assert relative_to_scope('/project/src/a.c', '/project') == 'src/a.c'
    assert relative_to_scope('/project', '/project') == ''
    assert relative_to_scope('/a/b', '/') == 'a/b'
    assert relative_to_scope('/projects/a', '/project') is None


def test_matchers_come_from_gitignore_grammar(engine):
    unanchored = engine.compile_rule('/project', '*.py')
    assert unanchored.exact_matcher.pattern == GitIgnoreSpecPattern.pattern_to_regex('**/*.py')[0]
    anchored = engine.compile_rule('/project', '/src/*.py')
    assert anchored.exact_matcher.pattern == GitIgnoreSpecPattern.pattern_to_regex('/src/*.py')[0]


def test_skipped_lines(engine):
    assert engine.compile_rule('/project', '') is None
    assert engine.compile_rule('/project', '   ') is None
    assert engine.compile_rule('/project', '# comment') is None
    assert engine.compile_rule('/project', '!') is None
    assert engine.compile_rule('/project', '/') is None


def test_rule_flags(engine):
    rule = engine.compile_rule('/project/', '!/build/', line=3, source='/project/.gitignore')
    assert rule.is_negation
    assert rule.is_anchored
    assert rule.is_directory_only
    assert rule.scope_dir == '/project'
    assert rule.pattern == '!/build/'
    assert rule.line == 3
    assert rule.source == '/project/.gitignore'

    plain = engine.compile_rule('/project', '*.log')
    assert not plain.is_negation
    assert not plain.is_anchored
    assert not plain.is_directory_only


def test_simple_glob_matches_at_any_depth(engine):
    assert matches(engine, '*.log', '/project/debug.log')
    assert matches(engine, '*.log', '/project/src/error.log')
    assert not matches(engine, '*.log', '/project/index.js')


def test_anchored_pattern(engine):
    assert matches(engine, '/root-only.txt', '/project/root-only.txt')
    assert not matches(engine, '/root-only.txt', '/project/sub/root-only.txt')
    assert matches(engine, 'root-only.txt', '/project/root-only.txt')
    assert matches(engine, 'root-only.txt', '/project/sub/root-only.txt')


def test_directory_only_pattern(engine):
    rule = engine.compile_rule('/project', 'node_modules/')
    assert rule.matches('/project/node_modules', is_directory=True)
    assert rule.matches('/project/node_modules/express/index.js')
    assert rule.matches('/project/pkg/node_modules', is_directory=True)
    # A plain file with the same name is not a directory
    assert not rule.matches('/project/node_modules')


def test_matched_directory_covers_contents(engine):
    assert matches(engine, 'dist', '/project/dist/js/app.js')
    assert matches(engine, '/dist', '/project/dist/js/app.js')


def test_middle_slash_pattern_matches_below_scope(engine):
    assert matches(engine, 'config/prod.json', '/project/config/prod.json')
    assert matches(engine, 'config/prod.json', '/project/app/config/prod.json')
    assert not matches(engine, 'config/prod.json', '/project/config/dev.json')


def test_double_star(engine):
    assert matches(engine, '**/foo', '/project/foo')
    assert matches(engine, '**/foo', '/project/a/b/foo')
    assert matches(engine, 'a/**/b', '/project/a/b')
    assert matches(engine, 'a/**/b', '/project/a/x/y/b')
    assert matches(engine, '/abc/**', '/project/abc/x/y')
    # A trailing /** matches the directory itself as well as its contents
    assert matches(engine, '/abc/**', '/project/abc', is_directory=True)
    assert not matches(engine, '/abc/**', '/project/abc')


def test_single_star_does_not_cross_separators(engine):
    assert matches(engine, '/src/*.js', '/project/src/app.js')
    assert not matches(engine, '/src/*.js', '/project/src/lib/app.js')


def test_character_classes(engine):
    assert matches(engine, 'file[0-9].txt', '/project/file1.txt')
    assert not matches(engine, 'file[0-9].txt', '/project/filea.txt')
    assert matches(engine, '[!a]bc', '/project/xbc')
    assert not matches(engine, '[!a]bc', '/project/abc')


def test_escapes(engine):
    rule = engine.compile_rule('/project', '\\#notcomment')
    assert rule is not None
    assert rule.matches('/project/#notcomment')

    bang = engine.compile_rule('/project', '\\!important')
    assert not bang.is_negation
    assert bang.matches('/project/!important')

    assert matches(engine, 'foo\\ ', '/project/foo ')
    assert not matches(engine, 'foo\\ ', '/project/foo')


def test_rule_is_pinned_to_scope(engine):
    # Path components above the scope directory never take part in matching
    rule = engine.compile_rule('/tmp/project', 'tmp')
    assert not rule.matches('/tmp/project/src/a.txt')
    assert rule.matches('/tmp/project/tmp', is_directory=True)
    assert not rule.applies_to('/elsewhere/tmp')


@pytest.mark.skipif(CASE_INSENSITIVE_PATHS, reason="host compares paths case-insensitively")
def test_case_sensitive_host(engine):
    assert not matches(engine, '*.LOG', '/project/debug.log')


@pytest.mark.skipif(not CASE_INSENSITIVE_PATHS, reason="host compares paths case-sensitively")
def test_case_insensitive_host(engine):
    assert matches(engine, '*.LOG', '/project/debug.log')


def test_invalid_patterns_raise(engine):
    with pytest.raises(InvalidPatternError) as exc_info:
        engine.compile_rule('/project', 'file[abc')
    assert exc_info.value.pattern == 'file[abc'
    assert 'range' in exc_info.value.message

    with pytest.raises(InvalidPatternError):
        engine.compile_rule('/project', 'trailing\\')


def test_validate_pattern(engine):
    assert engine.validate_pattern('*.py') == (True, None)
    is_valid, error = engine.validate_pattern('file[abc')
    assert not is_valid
    assert error


def test_last_match_wins(engine):
    rules = [
        engine.compile_rule('/project', line)
        for line in ['*.log', '!important.log', 'important.log']
    ]
    result = engine.match(enumerate(rules), '/project/important.log')
    assert result.should_ignore
    assert result.index == 2
    assert result.matched_pattern == 'important.log'

    result = engine.match(enumerate(rules[:2]), '/project/important.log')
    assert not result.should_ignore
    assert result.matched_pattern == '!important.log'


def test_no_matching_rule(engine):
    rules = [engine.compile_rule('/project', '*.log')]
    result = engine.match(enumerate(rules), '/project/main.py')
    assert not result.should_ignore
    assert result.rule is None
    assert result.matched_scope is None


def test_containment_matcher(engine):
    unanchored = engine.compile_rule('/project', '!index.html')
    assert unanchored.could_contain('/project')
    assert unanchored.could_contain('/project/any/depth')

    anchored = engine.compile_rule('/project', '!/build/out/keep.txt')
    assert anchored.could_contain('/project/build')
    assert anchored.could_contain('/project/build/out')
    assert not anchored.could_contain('/project/src')
    assert not anchored.could_contain('/project/build/other')
    assert anchored.could_contain('/project/build/out/keep.txt/deeper')
    assert not anchored.could_contain('/elsewhere/build')

    double_star = engine.compile_rule('/project', '!/build/**/keep.txt')
    assert double_star.could_contain('/project/build/a/b/c')
    assert not double_star.could_contain('/project/src/a')


def test_compiled_matchers_are_cached(engine):
    first = engine.compile_rule('/project', '*.log')
    second = engine.compile_rule('/project', '*.log', line=7)
    assert first.exact_matcher is second.exact_matcher

    engine.clear_cache()
    assert not engine._compiled_cache
