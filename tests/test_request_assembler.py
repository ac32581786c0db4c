"""Tests for RequestAssembler."""

import base64
from pathlib import Path

import pytest

from core.constants import DEFAULT_GREETING, PROJECT_FOOTER
from core.models import Attachment, Message, MessageRole, ProjectFile
from core.services.request_assembler import RequestAssembler


@pytest.fixture
def assembler() -> RequestAssembler:
    return RequestAssembler()


def _attachment(path: Path, type: str = "") -> Attachment:
    return Attachment.create(name=path.name, path=str(path), type=type)


def test_history_and_new_turn(assembler):
    turns = assembler.assemble("hello", history=[{"role": "user", "content": "hi"}])

    assert [turn.model_dump() for turn in turns] == [
        {"role": "user", "content": [{"type": "text", "text": "hi"}]},
        {"role": "user", "content": [{"type": "text", "text": "hello"}]},
    ]


def test_empty_text_uses_greeting(assembler):
    turns = assembler.assemble("")

    assert len(turns) == 1
    content = turns[0].content
    assert len(content) == 1
    assert content[0].type == "text"
    assert content[0].text == DEFAULT_GREETING


def test_missing_attachment_is_skipped(assembler, tmp_path):
    present = tmp_path / "present.txt"
    present.write_text("kept", encoding="utf-8")
    missing = tmp_path / "missing.txt"

    turns = assembler.assemble(
        "question", attachments=[_attachment(missing), _attachment(present)]
    )

    blocks = turns[-1].content
    assert len(blocks) == 2
    assert "present.txt" in blocks[0].text
    assert "kept" in blocks[0].text
    assert all("missing.txt" not in getattr(block, "text", "") for block in blocks)


def test_attachment_without_path_is_skipped(assembler):
    attachment = Attachment.create(name="ghost.txt", path="", type="text/plain")

    turns = assembler.assemble("q", attachments=[attachment])

    assert [block.text for block in turns[-1].content] == ["q"]


def test_text_attachment_is_wrapped(assembler, tmp_path):
    source = tmp_path / "notes.md"
    source.write_text("# Title", encoding="utf-8")

    block = assembler.assemble("q", attachments=[_attachment(source)])[-1].content[0]

    assert block.text == (
        "### Contents of file notes.md ###\n\n# Title\n\n### End of file notes.md ###"
    )


def test_image_attachment_becomes_base64_block(assembler, tmp_path):
    data = b"\x89PNG\r\n\x1a\nfake"
    image = tmp_path / "shot.png"
    image.write_bytes(data)

    block = assembler.assemble("look", attachments=[_attachment(image)])[-1].content[0]

    assert block.type == "image"
    assert block.source.media_type == "image/png"
    assert base64.b64decode(block.source.data) == data


def test_binary_attachment_gets_placeholder(assembler, tmp_path):
    blob = tmp_path / "data.bin"
    blob.write_bytes(b"\xff\xfe\x00\x81")

    block = assembler.assemble("q", attachments=[_attachment(blob)])[-1].content[0]

    assert block.text == (
        "[Attached binary file: data.bin, type: application/octet-stream, size: 4 bytes]"
    )


def test_project_context_section(assembler, tmp_path):
    first = tmp_path / "a.py"
    first.write_text("print(1)", encoding="utf-8")
    second = tmp_path / "b.csv"
    second.write_text("x,y", encoding="utf-8")
    files = [
        ProjectFile.create("p1", "a.py", str(first), "text/x-python"),
        ProjectFile.create("p1", "b.csv", str(second), ""),
    ]

    blocks = assembler.assemble("q", project_files=files)[-1].content

    texts = [block.text for block in blocks]
    assert texts[0] == "\n\n### PROJECT CONTEXT (2 files) ###\n"
    assert texts[1] == "### Project file: a.py ###\n\nprint(1)\n\n"
    assert texts[2] == "### Project file: b.csv ###\n\nx,y\n\n"
    assert texts[3] == PROJECT_FOOTER
    assert texts[4] == "q"


def test_attachments_come_before_project_context(assembler, tmp_path):
    attached = tmp_path / "one.txt"
    attached.write_text("1", encoding="utf-8")
    project = tmp_path / "two.txt"
    project.write_text("2", encoding="utf-8")

    blocks = assembler.assemble(
        "q",
        attachments=[_attachment(attached)],
        project_files=[ProjectFile.create("p", "two.txt", str(project), "")],
    )[-1].content

    assert "one.txt" in blocks[0].text
    assert "PROJECT CONTEXT (1 files)" in blocks[1].text


def test_history_normalization(assembler):
    history = [
        Message.create("c1", MessageRole.USER, "first"),
        {"content": "no role"},
        {"role": "assistant", "content": [{"type": "text", "text": "blocks"}]},
        {"role": MessageRole.USER, "content": ""},
    ]

    turns = assembler.assemble("next", history=history)

    assert [turn.role for turn in turns] == ["user", "assistant", "user", "user"]
    assert turns[0].content[0].text == "first"
    assert turns[1].content[0].text == "blocks"
    assert turns[2].content == []
