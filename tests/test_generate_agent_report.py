from generate_agent_report import main

REPORT_CSV = (
    "Phone Report,,,,,,,,,,\n"
    ",Agent,,Outbound,No Answer,,,,,,Available\n"
    ",Ace,,50,1,,,,,,90%\n"
    ",Rookie,,10,20,,,,,,5%\n"
)


def test_writes_all_reports(tmp_path, capsys):
    report = tmp_path / "report.csv"
    report.write_text(REPORT_CSV)
    output_dir = tmp_path / "out"

    assert main([str(report), "--output-dir", str(output_dir)]) == 0

    assert (output_dir / "agent-report.pdf").read_bytes().startswith(b"%PDF")
    assert (output_dir / "agent-performance-report.docx").exists()
    assert (output_dir / "agent-performance-report.xlsx").exists()
    out = capsys.readouterr().out
    assert "Total Agents: 2" in out
    assert "Elite Agents: 1" in out


def test_selected_formats_only(tmp_path):
    report = tmp_path / "report.csv"
    report.write_text(REPORT_CSV)

    assert main([str(report), "--output-dir", str(tmp_path), "--formats", "docx"]) == 0

    assert (tmp_path / "agent-performance-report.docx").exists()
    assert not (tmp_path / "agent-report.pdf").exists()


def test_missing_file(tmp_path):
    assert main([str(tmp_path / "missing.csv")]) == 1


def test_report_without_data(tmp_path):
    report = tmp_path / "report.csv"
    report.write_text("h\nh\n,,,,\n")
    assert main([str(report), "--output-dir", str(tmp_path)]) == 1
