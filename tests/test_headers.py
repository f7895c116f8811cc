from httpbridge.headers import deinterleave, interleave, join_header_values


def test_join_header_values_merges_repeated_names_in_order():
    pairs = [("X-A", "1"), ("Content-Type", "text/plain"), ("X-A", "2")]
    assert join_header_values(pairs) == {"X-A": "1, 2", "Content-Type": "text/plain"}


def test_join_header_values_is_case_insensitive_and_keeps_first_spelling():
    pairs = [("Set-Cookie", "a=1"), ("set-cookie", "b=2")]
    assert join_header_values(pairs) == {"Set-Cookie": "a=1, b=2"}


def test_interleave_flattens_pairs():
    assert interleave({"A": "1", "B": "2"}) == ["A", "1", "B", "2"]


def test_interleave_skips_missing_keys_and_values():
    headers = {None: "HTTP/1.1 200 OK", "A": None, "B": "2"}
    assert interleave(headers) == ["B", "2"]


def test_interleave_empty():
    assert interleave({}) == []


def test_deinterleave_rebuilds_mapping():
    assert deinterleave(["A", "1", "B", "2"]) == {"A": "1", "B": "2"}


def test_deinterleave_drops_dangling_key():
    assert deinterleave(["A", "1", "B"]) == {"A": "1"}


def test_deinterleave_reverses_interleave():
    headers = {"Content-Type": "text/html", "X-A": "1, 2"}
    assert deinterleave(interleave(headers)) == headers
