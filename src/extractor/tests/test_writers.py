import pytest
from loguru import logger

from src.extractor.errors import SinkError
from src.extractor.sink.writers import DelimitedFileWriter, LineFileWriter


def test_rows_are_separated_and_unquoted(tmp_path):
    path = tmp_path / "out" / "multisig.csv"

    with DelimitedFileWriter(str(path), ";") as writer:
        writer.write_row(("a b", "1", 'quote"d'))
        writer.write_rows([("x", "2", "y")])

    assert path.read_text() == 'a b;1;quote"d\nx;2;y\n'
    assert writer.rows_written == 2


def test_field_with_separator_is_rejected(tmp_path):
    writer = DelimitedFileWriter(str(tmp_path / "out.csv"), ";").open()
    with pytest.raises(SinkError):
        writer.write_row(("a;b",))
    writer.close()


def test_unwritable_path(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("")

    with pytest.raises(SinkError):
        DelimitedFileWriter(str(blocker / "out.csv")).open()


def test_write_before_open(tmp_path):
    with pytest.raises(SinkError):
        DelimitedFileWriter(str(tmp_path / "out.csv")).write_row(("a",))
    with pytest.raises(SinkError):
        LineFileWriter(str(tmp_path / "out.txt")).write_line("a")


def test_line_writer(tmp_path):
    path = tmp_path / "known-pools.txt"

    with LineFileWriter(str(path)) as writer:
        writer.write_lines(["F2Pool", "NA", "Pool; with separator"])

    assert path.read_text().splitlines() == ["F2Pool", "NA", "Pool; with separator"]


def test_line_writer_rejects_line_breaks(tmp_path):
    with LineFileWriter(str(tmp_path / "out.txt")) as writer:
        with pytest.raises(SinkError):
            writer.write_line("two\nlines")


@pytest.fixture
def log_messages():
    messages = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)


def test_close_reports_written_output(tmp_path, log_messages):
    with LineFileWriter(str(tmp_path / "out.txt")) as writer:
        writer.write_line("F2Pool")

    assert "Output written" in log_messages
    assert "Output incomplete" not in log_messages


def test_close_after_failure_does_not_report_written_output(tmp_path, log_messages):
    with pytest.raises(SinkError):
        with DelimitedFileWriter(str(tmp_path / "out.csv"), ";") as writer:
            writer.write_row(("a",))
            writer.write_row(("a;b",))

    assert "Output written" not in log_messages
    assert "Output incomplete" in log_messages
