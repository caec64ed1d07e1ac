import pytest

from webext_typegen.utils import (
    SchemaLoaderError,
    collect_schemas,
    load_schema_file,
    strip_json_comments,
)


def test_strip_line_comments() -> None:
    text = '// License\n[{"namespace": "a"}] // trailing\n'
    assert strip_json_comments(text) == '\n[{"namespace": "a"}] \n'


def test_strip_block_comments_keeps_lines() -> None:
    text = '/* one\ntwo */[{"namespace": "a"}]'
    assert strip_json_comments(text) == '\n[{"namespace": "a"}]'


def test_comment_markers_inside_strings_survive() -> None:
    text = '{"url": "https://example.com/*x*/", "q": "say \\"//hi\\""}'
    assert strip_json_comments(text) == text


def test_load_schema_file(tmp_path) -> None:
    path = tmp_path / "alarms.json"
    path.write_text('// comment\n[{"namespace": "alarms"}]', encoding="utf-8")
    assert load_schema_file(path) == [{"namespace": "alarms"}]


@pytest.mark.parametrize(
    ("content", "message"),
    [("[{", "Invalid JSON"), ('{"namespace": "a"}', "must contain a list")],
)
def test_load_schema_file_errors(tmp_path, content, message) -> None:
    path = tmp_path / "bad.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(SchemaLoaderError, match=message):
        load_schema_file(path)


def test_load_missing_schema_file(tmp_path) -> None:
    with pytest.raises(SchemaLoaderError, match="Error reading file"):
        load_schema_file(tmp_path / "missing.json")


def test_collect_schemas_sorted_per_folder(tmp_path) -> None:
    first, second = tmp_path / "toolkit", tmp_path / "browser"
    first.mkdir()
    second.mkdir()
    (first / "b.json").write_text('[{"namespace": "b"}]', encoding="utf-8")
    (first / "a.json").write_text('[{"namespace": "a"}]', encoding="utf-8")
    (first / "notes.txt").write_text("ignored", encoding="utf-8")
    (second / "c.json").write_text('[{"namespace": "c"}]', encoding="utf-8")

    fragments = collect_schemas([first, second])
    assert [name for name, _ in fragments] == ["a.json", "b.json", "c.json"]
    assert fragments[2][1] == [{"namespace": "c"}]


def test_collect_schemas_missing_folder(tmp_path) -> None:
    with pytest.raises(SchemaLoaderError, match="Schema folder not found"):
        collect_schemas([tmp_path / "missing"])
