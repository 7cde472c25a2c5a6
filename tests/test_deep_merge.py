from chunkeval.config import deep_merge_dicts


def test_deep_merge_nested() -> None:
    a = {"x": 1, "nested": {"a": 1, "b": 2}}
    b = {"nested": {"b": 3, "c": 4}, "y": 5}
    merged = deep_merge_dicts(a, b)
    assert merged == {"x": 1, "nested": {"a": 1, "b": 3, "c": 4}, "y": 5}
    assert a["nested"] == {"a": 1, "b": 2}


def test_lists_are_replaced() -> None:
    merged = deep_merge_dicts({"excluded_chunk_types": [1, 2]}, {"excluded_chunk_types": []})
    assert merged == {"excluded_chunk_types": []}
