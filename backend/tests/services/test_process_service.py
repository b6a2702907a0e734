"""
Unit Tests for ProcessService and the per-type corrections.

Repositories and the batch service are mocked; corrections run for real
against a pinned code table.
"""
from unittest.mock import Mock

import pytest

from revenue.services.process_service import (
    ProcessService,
    format_date_for_export,
    process_cha,
    process_cht,
    process_opd,
    remap_adp_type_codes,
    should_delete_seq,
)


def test_remap_adp_type_codes():
    records = [
        {"HN": "1", "ADP": "15", "TYPE": "15"},
        {"HN": "2", "ADP": "3", "TYPE": "16"},
        {"HN": "3", "ADP": " 15 "},
    ]
    processed = remap_adp_type_codes(records, {"15": "16"})

    assert processed == [
        {"HN": "1", "ADP": "16", "TYPE": "16"},
        {"HN": "2", "ADP": "3", "TYPE": "16"},
        {"HN": "3", "ADP": "16"},
    ]
    assert records[0]["ADP"] == "15"


@pytest.mark.parametrize(
    "record, expected",
    [
        ({"CODE": "DELETE", "QTY": "3"}, True),
        ({"CODE": "X01", "QTY": "0"}, True),
        ({"CODE": "X01", "QTY": "0.00"}, True),
        ({"CODE": "X01", "QTY": ""}, True),
        ({"CODE": "X01"}, True),
        ({"CODE": "X01", "QTY": "2"}, False),
        ({"CODE": "X01", "QTY": "abc"}, False),
        ({"CODE": "delete", "QTY": "1"}, False),
    ],
)
def test_should_delete_seq(record, expected):
    assert should_delete_seq(record) is expected


def test_process_cht():
    records = [
        {"SEQ": "1", "CODE": "A", "QTY": "2"},
        {"SEQ": "2", "CODE": "DELETE", "QTY": "1"},
        {"SEQ": "3", "CODE": "B", "QTY": "0"},
        {"SEQ": "", "CODE": "DELETE", "QTY": "0"},
    ]
    kept, deleted = process_cht(records)

    assert [r["SEQ"] for r in kept] == ["1", ""]
    assert deleted == {"2", "3"}


def test_process_cha():
    records = [
        {"SEQ": "1", "CHRGITEM": "31", "QTY": "2", "RATE": "150.00", "TOTAL": "0"},
        {"SEQ": "2", "CHRGITEM": "31", "QTY": "3", "RATE": "1.5", "TOTAL": "0"},
        {"SEQ": "3", "CHRGITEM": "11", "QTY": "2", "RATE": "10", "TOTAL": "99"},
        {"SEQ": "4", "CHRGITEM": "31", "QTY": "2", "RATE": "10", "TOTAL": "0"},
        {"SEQ": "5", "CHRGITEM": "31", "QTY": "x", "RATE": "10", "TOTAL": "7"},
        {"CHRGITEM": "31", "RATE": "10", "TOTAL": "7"},
    ]
    processed = process_cha(records, {"4"})

    assert [r.get("SEQ") for r in processed] == ["1", "2", "3", "5", None]
    assert [r["TOTAL"] for r in processed] == ["300", "4.5", "99", "7", "0"]
    assert records[0]["TOTAL"] == "0"


def test_process_opd():
    records = [
        {"HN": "1", "OPTYPE": " a1 ", "DATE": "2024-01-15"},
        {"HN": "2", "OPTYPE": "", "DATE": "20240116"},
        {"HN": "3", "DATE": "15/01/2024"},
    ]
    processed = process_opd(records)

    assert processed == [
        {"HN": "1", "OPTYPE": "A1", "DATE": "20240115"},
        {"HN": "2", "OPTYPE": "", "DATE": "20240116"},
        {"HN": "3", "DATE": "15/01/2024"},
    ]


@pytest.mark.parametrize(
    "value, expected",
    [("2024-01-15", "20240115"), ("20240115", "20240115"), ("15/01/2024", "15/01/2024"), ("๒๐๒๔๐๑๑๕", "๒๐๒๔๐๑๑๕")],
)
def test_format_date_for_export(value, expected):
    assert format_date_for_export(value) == expected


# Processing flow

FILES = {
    "f-cha": {"id": "f-cha", "batch_id": "b1", "filename": "CHA6701.DBF", "file_type": "CHA"},
    "f-cht": {"id": "f-cht", "batch_id": "b1", "filename": "CHT6701.DBF", "file_type": "CHT"},
    "f-adp": {"id": "f-adp", "batch_id": "b1", "filename": "ADP6701.DBF", "file_type": "ADP"},
}

ROWS = {
    "f-cha": [
        {"SEQ": "1", "CHRGITEM": "31", "QTY": "2", "RATE": "5", "TOTAL": "0"},
        {"SEQ": "2", "CHRGITEM": "31", "QTY": "1", "RATE": "5", "TOTAL": "0"},
    ],
    "f-cht": [{"SEQ": "1", "CODE": "A", "QTY": "2"}, {"SEQ": "2", "CODE": "DELETE", "QTY": "1"}],
    "f-adp": [{"HN": "1", "ADP": "15"}],
}


@pytest.fixture
def files():
    repo = Mock()
    repo.list_for_batch = Mock(return_value=list(FILES.values()))
    repo.list_rows = Mock(side_effect=lambda file_id: [{"data": r} for r in ROWS[file_id]])
    return repo


@pytest.fixture
def logs():
    repo = Mock()
    repo.add = Mock(return_value=1)
    return repo


@pytest.fixture
def batch_service():
    service = Mock()
    service.finish_processing = Mock(
        return_value={"id": "b1", "status": "completed", "processed_files": 3, "total_files": 3}
    )
    return service


@pytest.fixture
def service(files, logs, batch_service, billing_codes):
    return ProcessService(files, logs, batch_service, billing_codes)


def _replaced(files):
    return {c[0][0]: c[0][1] for c in files.replace_rows.call_args_list}


def test_process_batch(service, files, logs, batch_service):
    result = service.process_batch("b1", actor_id="u1", actor_name="Som")

    batch_service.update_batch_status.assert_called_once_with("b1", "processing")
    batch_service.finish_processing.assert_called_once_with("b1")
    assert result["batch_status"] == "completed"
    assert result["processed_files"] == 3

    # CHT runs first so its dropped SEQ reaches the CHA file
    assert [r["file_id"] for r in result["results"]] == ["f-cht", "f-cha", "f-adp"]
    assert all(r["status"] == "completed" for r in result["results"])

    replaced = _replaced(files)
    assert replaced["f-cht"] == [{"SEQ": "1", "CODE": "A", "QTY": "2"}]
    assert replaced["f-cha"] == [{"SEQ": "1", "CHRGITEM": "31", "QTY": "2", "RATE": "5", "TOTAL": "10"}]
    assert replaced["f-adp"] == [{"HN": "1", "ADP": "16"}]

    files.update.assert_any_call("f-cht", {"record_count": 1, "status": "completed"})
    log = logs.add.call_args_list[0][0][0]
    assert log["file_id"] == "f-cht"
    assert log["processing_type"] == "batch"
    assert log["record_count"] == 1
    assert log["status"] == "completed"
    assert log["processed_by_id"] == "u1"
    assert log["processed_by_name"] == "Som"
    assert log["details"]["input_records"] == 2


def test_failed_file_reported_and_marked(service, files, batch_service):
    def rows(file_id):
        if file_id == "f-cha":
            raise RuntimeError("rows unreadable")
        return [{"data": r} for r in ROWS[file_id]]

    files.list_rows.side_effect = rows
    batch_service.finish_processing.return_value = {
        "id": "b1", "status": "processing", "processed_files": 2, "total_files": 3,
    }
    result = service.process_batch("b1")

    failed = [r for r in result["results"] if r["status"] == "error"]
    assert [r["file_id"] for r in failed] == ["f-cha"]
    assert failed[0]["error"] == "rows unreadable"
    files.update.assert_any_call("f-cha", {"status": "failed"})
    assert "f-cha" not in _replaced(files)
    assert result["batch_status"] == "processing"


def test_unknown_type_passes_through(service, files):
    files.list_for_batch.return_value = [{"id": "f-x", "batch_id": "b1", "filename": "LAB.DBF", "file_type": None}]
    files.list_rows.side_effect = lambda file_id: [{"data": {"HN": "1"}}]
    result = service.process_batch("b1")

    assert _replaced(files) == {"f-x": [{"HN": "1"}]}
    assert result["results"][0]["details"] == "No corrections for this file type"


def test_ins_drops_deleted_seqs(service):
    processed, _ = service.process_records("INS", [{"SEQ": "1"}, {"SEQ": "2"}, {"HN": "3"}], {"2"})
    assert processed == [{"SEQ": "1"}, {"HN": "3"}]
