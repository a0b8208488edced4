from skein.parser.tokenizer import TokenStream, tokenize_command_line


def test_whitespace_separates_tokens():
    stream = tokenize_command_line("app deploy\tprod\nnow")
    assert stream.tokens == ["app", "deploy", "prod", "now"]
    assert stream.new_token is False


def test_trailing_whitespace_starts_new_token():
    stream = tokenize_command_line("app --mode ")
    assert stream == TokenStream(["app", "--mode"], True)


def test_repeated_whitespace_emits_no_empty_tokens():
    stream = tokenize_command_line("  app   run  ")
    assert stream.tokens == ["app", "run"]
    assert stream.new_token is True


def test_empty_line():
    stream = tokenize_command_line("")
    assert stream.tokens == []
    assert stream.new_token is False


def test_single_quotes_suppress_everything():
    stream = tokenize_command_line(r"app 'a b\n \"c\"'")
    assert stream.tokens == ["app", r'a b\n \"c\"']


def test_double_quotes_keep_whitespace_and_honor_backslash():
    stream = tokenize_command_line(r'app "say \"hi\" it\'s"')
    assert stream.tokens == ["app", "say \"hi\" it's"]


def test_double_quotes_keep_single_quotes_literal():
    stream = tokenize_command_line("app \"it's here\"")
    assert stream.tokens == ["app", "it's here"]


def test_backslash_escapes_whitespace_and_quotes():
    stream = tokenize_command_line(r"app a\ b \'x \\")
    assert stream.tokens == ["app", "a b", "'x", "\\"]
    assert stream.new_token is False


def test_escaped_trailing_space_is_part_of_token():
    stream = tokenize_command_line("app a\\ ")
    assert stream.tokens == ["app", "a "]
    assert stream.new_token is False


def test_quotes_join_adjacent_text():
    stream = tokenize_command_line("app --name='big bang'x")
    assert stream.tokens == ["app", "--name=big bangx"]


def test_unterminated_single_quote_is_tolerated():
    stream = tokenize_command_line("app 'open ended ")
    assert stream.tokens == ["app", "open ended "]
    assert stream.new_token is False


def test_unterminated_double_quote_is_tolerated():
    stream = tokenize_command_line('app "half')
    assert stream.tokens == ["app", "half"]
    assert stream.new_token is False


def test_trailing_backslash_is_kept():
    stream = tokenize_command_line("app path\\")
    assert stream.tokens == ["app", "path\\"]
    assert stream.new_token is False


def test_last_offset_points_at_raw_token_start():
    assert tokenize_command_line('app --msg "hello wo').last_offset == 10
    assert tokenize_command_line("app New\\ Y").last_offset == 4
    assert tokenize_command_line("  app").last_offset == 2


def test_last_offset_is_not_compared():
    assert tokenize_command_line("a  b") == TokenStream(["a", "b"], False)
