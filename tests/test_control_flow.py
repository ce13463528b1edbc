from volt.interpreter import run_program


def output(capsys, source):
    run_program(source)
    return capsys.readouterr().out.strip().split('\n')


def test_if_else_chain(capsys):
    assert output(capsys, '''
        fn grade(n) {
            if (n >= 90) return "A";
            else if (n >= 80) return "B";
            else return "C";
        }
        print grade(95);
        print grade(85);
        print grade(10);
    ''') == ['A', 'B', 'C']


def test_while_never_runs_when_false(capsys):
    assert output(capsys, '''
        let n = 0;
        while (false) { n = n + 1; }
        print n;
    ''') == ['0']


def test_run_until_runs_at_least_once(capsys):
    assert output(capsys, '''
        let n = 0;
        run { n = n + 1; } until (true)
        print n;
    ''') == ['1']


def test_run_until_repeats_until_truthy(capsys):
    assert output(capsys, '''
        let n = 0;
        run { n += 2; } until (n >= 7);
        print n;
    ''') == ['8']


def test_break_leaves_innermost_loop(capsys):
    assert output(capsys, '''
        for (let i = 0; i < 3; i++) {
            for (let j = 0; j < 3; j++) {
                if (j == 1) break;
                print str(i) + ":" + str(j);
            }
        }
    ''') == ['0:0', '1:0', '2:0']


def test_continue_in_for_still_increments(capsys):
    assert output(capsys, '''
        let seen = [];
        for (let i = 0; i < 5; i++) {
            if (i % 2 == 0) continue;
            seen.push(i);
        }
        print seen;
    ''') == ['[1, 3]']


def test_continue_in_while(capsys):
    assert output(capsys, '''
        let i = 0;
        let total = 0;
        while (i < 5) {
            i++;
            if (i == 3) continue;
            total += i;
        }
        print total;
    ''') == ['12']


def test_break_and_continue_in_run_until(capsys):
    assert output(capsys, '''
        let i = 0;
        run {
            i++;
            if (i < 3) continue;
            if (i == 5) break;
            print i;
        } until (i > 10);
    ''') == ['3', '4']


def test_return_unwinds_out_of_nested_loops(capsys):
    assert output(capsys, '''
        fn find(target) {
            for (let i = 0; i < 10; i++) {
                let j = 0;
                while (true) {
                    if (i * j == target) return str(i) + "*" + str(j);
                    j++;
                    if (j > i) break;
                }
            }
            return "none";
        }
        print find(12);
        print find(97);
    ''') == ['4*3', 'none']


def test_for_with_empty_clauses(capsys):
    assert output(capsys, '''
        let i = 0;
        for (;;) {
            i++;
            if (i == 4) break;
        }
        print i;
        for (i = 10; i < 12;) i++;
        print i;
    ''') == ['4', '12']


def test_break_inside_closure_inside_loop_belongs_to_closure_loop(capsys):
    assert output(capsys, '''
        let hits = 0;
        for (let i = 0; i < 3; i++) {
            let f = fn () {
                while (true) { hits++; break; }
            };
            f();
        }
        print hits;
    ''') == ['3']
