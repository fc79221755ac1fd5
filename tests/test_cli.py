from shift_log_tool.cli import collect_station_inputs, main, parse_args
from shift_log_tool.core.models import RawPhotoInput

from conftest import make_image_bytes


def test_parse_args_collects_station_pairs():
    args = parse_args(["summary", "--closer", "Sam", "--notes", "Alpha", "check belt",
                       "--notes", "Beta", "jam", "--photo", "Beta", "beta.jpg"])
    assert args.command == "summary"
    assert args.notes == [["Alpha", "check belt"], ["Beta", "jam"]]
    assert args.photo == [["Beta", "beta.jpg"]]
    assert args.priority == "Medium"


def test_collect_station_inputs_reads_photos(tmp_path):
    path = tmp_path / "gamma.png"
    path.write_bytes(make_image_bytes(10, 10))
    inputs = collect_station_inputs([["Alpha", "check belt"]], [["Gamma", str(path)]])
    assert inputs["Alpha"].notes == "check belt" and inputs["Alpha"].photo is None
    assert inputs["Gamma"].notes == ""
    assert inputs["Gamma"].photo.name == "gamma.png"
    assert inputs["Gamma"].photo.size == path.stat().st_size


def test_summary_command_prints_summary(capsys):
    code = main(["--log-level", "none", "summary", "--closer", "Sam", "--date", "2026-02-14",
                 "--notes", "Alpha", "check belt"])
    out = capsys.readouterr().out
    assert code == 0
    assert "Closing 2026-02-14" in out
    assert "Alpha: check belt" in out


def test_summary_requires_closer(capsys):
    code = main(["--log-level", "none", "summary", "--notes", "Alpha", "x"])
    assert code == 1
    assert "Enter closer name." in capsys.readouterr().err


def test_save_without_service_url_fails(monkeypatch, capsys):
    monkeypatch.delenv("SHIFT_LOG_API_URL", raising=False)
    code = main(["--log-level", "none", "save", "--closer", "Sam"])
    assert code == 1
    assert "Save failed" in capsys.readouterr().err


def test_unknown_station_fails(capsys):
    code = main(["--log-level", "none", "summary", "--closer", "Sam", "--notes", "Zulu", "x"])
    assert code == 1
    assert "Unknown station" in capsys.readouterr().err


def test_raw_photo_hint_reports_original_megabytes():
    raw = RawPhotoInput(name="bench.jpg", data=b"", size=5 * 1024 * 1024)
    assert raw.hint() == "Original: 5.00 MB (auto-compress on Save)"


def test_summary_shows_original_size_before_compression(tmp_path, capsys):
    path = tmp_path / "alpha.png"
    path.write_bytes(make_image_bytes(40, 30))
    code = main(["--log-level", "none", "summary", "--closer", "Sam", "--photo", "Alpha", str(path)])
    out = capsys.readouterr().out
    assert code == 0
    assert out.index("Alpha: Original:") < out.index("Alpha: Compressed: ~")


def test_unexpected_station_task_error_is_reported(monkeypatch, capsys):
    async def failing_build(args, config):
        raise ExceptionGroup("station tasks failed", [RuntimeError("boom")])

    monkeypatch.setattr("shift_log_tool.cli.build_log", failing_build)
    code = main(["--log-level", "none", "summary", "--closer", "Sam"])
    assert code == 1
    assert "Summary failed: boom" in capsys.readouterr().err
