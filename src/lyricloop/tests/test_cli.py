import pytest

import main as cli


def test_analyze_default_lyrics(capsys):
    assert cli.main(["--analyze"]) == 0
    out = capsys.readouterr().out
    assert "Largest intervals:" in out
    assert "Intervals over 5s:" in out


def test_analyze_given_file(tmp_path, capsys):
    p = tmp_path / "song.lrc"
    p.write_text("[00:00.00]A\n[00:10.00]B\n[00:12.00]C\n", encoding="utf-8")

    assert cli.main([str(p), "--analyze"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("3 lines")
    assert "10.00s" in out


def test_missing_lyrics_file(tmp_path):
    assert cli.main([str(tmp_path / "nope.lrc"), "--analyze"]) == 1


def test_sidecar_lyrics_for_audio(tmp_path):
    audio = tmp_path / "track.mp3"
    audio.write_bytes(b"")
    (tmp_path / "track.lrc").write_text("[00:01.00]only line", encoding="utf-8")

    lines = cli.resolve_lines(cli.parse_args(["--audio", str(audio)]))
    assert [line.text for line in lines] == ["only line"]


def test_unknown_profile_rejected():
    with pytest.raises(SystemExit):
        cli.parse_args(["--profile", "tablet"])
