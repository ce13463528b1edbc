from volt.lexer import tokenize


def kinds(source):
    return [tok.type for tok in tokenize(source)]


def test_always_ends_with_eof():
    assert kinds('') == ['EOF']
    assert kinds('   // only a comment') == ['EOF']


def test_keywords_and_identifiers():
    assert kinds('let x = nil;') == ['let', 'IDENT', '=', 'nil', ';', 'EOF']
    assert kinds('run until fn return breaker') == ['run', 'until', 'fn', 'return', 'IDENT', 'EOF']


def test_two_char_operators_are_greedy():
    source = '== != <= >= && || ++ -- += -= *= /='
    assert kinds(source)[:-1] == source.split()


def test_single_char_operators():
    assert kinds('a<b') == ['IDENT', '<', 'IDENT', 'EOF']
    assert kinds('!x') == ['!', 'IDENT', 'EOF']


def test_numbers():
    toks = tokenize('42 3.14 7.')
    assert [(t.type, t.lexeme) for t in toks[:-1]] == [
        ('NUMBER', '42'), ('NUMBER', '3.14'), ('NUMBER', '7'), ('.', '.'),
    ]


def test_number_followed_by_member():
    assert kinds('1.x') == ['NUMBER', '.', 'IDENT', 'EOF']


def test_string_escapes_are_decoded():
    tok = tokenize(r'"a\nb\t\"q\"\\ \0"')[0]
    assert tok.type == 'STRING'
    assert tok.literal == 'a\nb\t"q"\\ \0'
    assert tok.lexeme == r'"a\nb\t\"q\"\\ \0"'


def test_unknown_escape_kept_verbatim():
    tok = tokenize(r'"\q"')[0]
    assert tok.literal == '\\q'


def test_unterminated_string_is_error_token():
    toks = tokenize('print "oops')
    assert [t.type for t in toks] == ['print', 'ERROR', 'EOF']
    assert toks[1].lexeme == 'Unterminated string'


def test_unexpected_character_does_not_stop_scan():
    toks = tokenize('a @ b')
    assert [t.type for t in toks] == ['IDENT', 'ERROR', 'IDENT', 'EOF']
    assert toks[1].lexeme == "Unexpected character '@'"


def test_line_and_column_tracking():
    toks = tokenize('let a = 1;\n  print a;')
    print_tok = toks[5]
    assert print_tok.type == 'print'
    assert (print_tok.line, print_tok.column) == (2, 3)
    assert (toks[0].line, toks[0].column) == (1, 1)


def test_comments_are_skipped():
    assert kinds('a // b c\nd') == ['IDENT', 'IDENT', 'EOF']
    assert kinds('a / b') == ['IDENT', '/', 'IDENT', 'EOF']
