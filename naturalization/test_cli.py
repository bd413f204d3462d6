# naturalization/test_cli.py

import json

from naturalization.cli import EXIT_ERROR, EXIT_NOT_ELIGIBLE, EXIT_OK, main
from naturalization.config import get_settings


def run(store, *args):
    return main(["--store", str(store), *args])


def set_profile(store):
    return run(
        store, "set-profile",
        "--dob", "2000-01-01",
        "--lpr-date", "2020-01-01",
        "--state", "CA",
        "--state-since", "2020-06-01",
    )


def test_profile_then_evaluate(tmp_path, capsys):
    store = tmp_path / "data.json"
    assert set_profile(store) == EXIT_OK

    assert run(store, "evaluate", "--as-of", "2025-06-01") == EXIT_OK
    out = capsys.readouterr().out
    assert "As of 2025-06-01: ELIGIBLE" in out
    assert "Earliest filing date: 2024-10-03" in out


def test_evaluate_without_profile(tmp_path, capsys):
    assert run(tmp_path / "data.json", "evaluate", "--as-of", "2025-06-01") == EXIT_NOT_ELIGIBLE
    assert "No profile configured." in capsys.readouterr().out


def test_csv_import_then_evaluate(tmp_path, capsys):
    store = tmp_path / "data.json"
    set_profile(store)
    csv_file = tmp_path / "trips.csv"
    csv_file.write_text("startDate,endDate,destination,countAsAbsence\n2023-01-01,2024-01-02,Brazil,true\n")

    assert run(store, "import-csv", str(csv_file)) == EXIT_OK
    assert run(store, "evaluate", "--as-of", "2025-06-01") == EXIT_NOT_ELIGIBLE

    out = capsys.readouterr().out
    assert "Imported 1 trip(s); 1 stored." in out
    assert "Continuous residence broken" in out
    assert "Lower-risk filing date: 2028-07-07" in out


def test_csv_rejected_rows_exit_with_error(tmp_path, capsys):
    store = tmp_path / "data.json"
    csv_file = tmp_path / "trips.csv"
    csv_file.write_text("start,end\n2023-01-01,2023-01-05\n2023-02-31,2023-03-05\n")

    assert run(store, "import-csv", str(csv_file)) == EXIT_ERROR
    out = capsys.readouterr().out
    assert "Rejected rows:" in out
    assert "[csv_3]" in out


def test_evaluate_json_file(tmp_path, capsys):
    data = tmp_path / "export.json"
    data.write_text(json.dumps({
        "profile": {
            "dob": "2000-01-01",
            "lprDate": "2020-01-01",
            "eligibilityPath": "5-year",
            "state": "CA",
            "stateResidenceDate": "2025-04-01",
        },
        "trips": [],
    }))

    assert run(tmp_path / "data.json", "evaluate", "--as-of", "2025-06-01", "--file", str(data)) == EXIT_NOT_ELIGIBLE
    assert "more day(s) in CA" in capsys.readouterr().out


def test_export_writes_data_pack(tmp_path, capsys):
    store = tmp_path / "data.json"
    set_profile(store)
    output = tmp_path / "pack.json"

    assert run(store, "export", "--as-of", "2025-06-01", "--output", str(output)) == EXIT_OK
    pack = json.loads(output.read_text())
    assert pack["eligibility"]["eligible"] is True
    assert pack["profile"]["state_of_residence"] == "CA"


def test_corrupt_store_is_reported(tmp_path, capsys):
    store = tmp_path / "data.json"
    store.write_text("[]")

    assert run(store, "evaluate") == EXIT_ERROR
    assert "not a JSON object" in capsys.readouterr().err


def test_store_path_from_environment(tmp_path, monkeypatch, capsys):
    store = tmp_path / "env-store.json"
    monkeypatch.setenv("NATURALIZATION_DATA_FILE", str(store))
    get_settings.cache_clear()
    try:
        assert main(["set-profile", "--dob", "2000-01-01", "--lpr-date", "2020-01-01",
                     "--state", "CA", "--state-since", "2020-06-01"]) == EXIT_OK
        assert store.exists()
    finally:
        get_settings.cache_clear()


def test_add_edit_remove_trip(tmp_path, capsys):
    store = tmp_path / "data.json"
    assert run(store, "add-trip", "--start", "2024-03-01", "--end", "2024-03-20", "--destination", "Japan") == EXIT_OK
    assert run(store, "add-trip", "--start", "2024-07-01", "--end", "2024-07-04", "--not-counted") == EXIT_OK
    capsys.readouterr()

    assert run(store, "list-trips") == EXIT_OK
    out = capsys.readouterr().out
    assert "1. 2024-03-01 -> 2024-03-20  19 day(s)  Japan" in out
    assert "2. 2024-07-01 -> 2024-07-04  3 day(s)  - (not counted)" in out

    assert run(store, "edit-trip", "1", "--end", "2024-03-10", "--counted") == EXIT_OK
    assert "Updated: 1. 2024-03-01 -> 2024-03-10  9 day(s)  Japan" in capsys.readouterr().out

    assert run(store, "remove-trip", "--start", "2024-07-01") == EXIT_OK
    assert "Removed: 2. 2024-07-01 -> 2024-07-04" in capsys.readouterr().out
    assert run(store, "list-trips") == EXIT_OK
    out = capsys.readouterr().out
    assert "1. 2024-03-01 -> 2024-03-10" in out
    assert "2024-07-01" not in out

    assert run(store, "remove-trip", "--number", "1") == EXIT_OK
    capsys.readouterr()
    assert run(store, "list-trips") == EXIT_OK
    assert "No trips stored." in capsys.readouterr().out


def test_trip_edits_are_validated(tmp_path, capsys):
    store = tmp_path / "data.json"
    run(store, "add-trip", "--start", "2024-03-01", "--end", "2024-03-20")

    assert run(store, "edit-trip", "1", "--end", "2024-02-01") == EXIT_ERROR
    assert run(store, "edit-trip", "5", "--destination", "Peru") == EXIT_ERROR
    assert run(store, "remove-trip", "--start", "2020-01-01") == EXIT_ERROR
    assert run(store, "add-trip", "--start", "2024-05-02", "--end", "2024-05-01") == EXIT_ERROR
    assert "No trip number 5; 1 stored." in capsys.readouterr().err

    assert run(store, "list-trips") == EXIT_OK
    assert "2024-03-01 -> 2024-03-20" in capsys.readouterr().out


def test_clear_needs_confirmation(tmp_path, capsys):
    store = tmp_path / "data.json"
    set_profile(store)

    assert run(store, "clear") == EXIT_ERROR
    assert store.exists()

    assert run(store, "clear", "--yes") == EXIT_OK
    assert not store.exists()
    assert run(store, "evaluate", "--as-of", "2025-06-01") == EXIT_NOT_ELIGIBLE


def test_malformed_store_section_is_reported(tmp_path, capsys):
    store = tmp_path / "data.json"
    store.write_text(json.dumps({"profile": None}))

    assert run(store, "evaluate", "--as-of", "2025-06-01") == EXIT_ERROR
    assert "'profile' is not a JSON object" in capsys.readouterr().err


def test_evaluate_file_with_array_document(tmp_path, capsys):
    data = tmp_path / "export.json"
    data.write_text("[]")

    assert run(tmp_path / "data.json", "evaluate", "--as-of", "2025-06-01", "--file", str(data)) == EXIT_NOT_ELIGIBLE
    out = capsys.readouterr().out
    assert "Import issues:" in out
    assert "[document]" in out


def test_non_utf8_csv_is_an_error(tmp_path, capsys):
    csv_file = tmp_path / "trips.csv"
    csv_file.write_bytes(b"start,end\n\xff\xfe2023-01-01,2023-01-05\n")

    assert run(tmp_path / "data.json", "import-csv", str(csv_file)) == EXIT_ERROR
    assert "Error:" in capsys.readouterr().err
