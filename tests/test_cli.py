"""
cpu4kit CLI tests - drive main(argv) and check stdout / exit codes.
"""

import pytest

import cpu4kit
from cpu4_emulator.emu import CPU4Emulator


class TestRun:

    def test_run_hex_halts(self, capsys):
        rc = cpu4kit.main(["run", "--hex", "15 23 50 B0 F0"])
        out = capsys.readouterr().out
        assert rc == cpu4kit.EXIT_OK
        assert "OUT A=8" in out
        assert "A=8 B=3 C=0 D=0" in out
        assert "Running=0" in out

    def test_run_trace(self, capsys):
        rc = cpu4kit.main(["run", "--hex", "1A 3F 10 B0 AF B0 F0", "--trace"])
        out = capsys.readouterr().out
        assert rc == 0
        assert "STA [15] <- A=10" in out
        assert "OUT A=0 ***" in out
        assert "OUT A=10 ***" in out
        assert "HLT - CPU Halted" in out

    def test_run_step_budget(self, capsys):
        rc = cpu4kit.main(["run", "--hex", "15 B0 D0 81 71 F0", "--max-steps", "20"])
        out = capsys.readouterr().out
        assert rc == cpu4kit.EXIT_STOPPED
        assert "Max steps reached!" in out
        assert [line for line in out.splitlines() if line.startswith("OUT ")] == \
               ["OUT A=5", "OUT A=4", "OUT A=3", "OUT A=2", "OUT A=1"]

    def test_run_breakpoint(self, capsys):
        rc = cpu4kit.main(["run", "--hex", "15 23 50 B0 F0", "--break", "3"])
        out = capsys.readouterr().out
        assert rc == cpu4kit.EXIT_STOPPED
        assert "Breakpoint at PC=3" in out
        assert "OUT A=8" not in out

    def test_run_binary_file(self, tmp_path, capsys):
        path = tmp_path / "add.bin"
        path.write_bytes(bytes([0x15, 0x23, 0x50, 0xB0, 0xF0]))
        assert cpu4kit.main(["run", str(path)]) == 0
        assert "OUT A=8" in capsys.readouterr().out

    def test_run_hex_file(self, tmp_path, capsys):
        path = tmp_path / "add.hex"
        path.write_text("15 23 ; load\n50 B0 F0\n", encoding="utf-8")
        assert cpu4kit.main(["run", str(path)]) == 0
        assert "OUT A=8" in capsys.readouterr().out

    def test_bad_hex_text(self, capsys):
        assert cpu4kit.main(["run", "--hex", "15 ZZ"]) == cpu4kit.EXIT_ERROR
        assert "OUT" not in capsys.readouterr().out

    def test_missing_file(self, tmp_path):
        assert cpu4kit.main(["run", str(tmp_path / "missing.bin")]) == cpu4kit.EXIT_ERROR

    def test_bad_breakpoint(self):
        assert cpu4kit.main(["run", "--hex", "F0", "--break", "zz"]) == cpu4kit.EXIT_ERROR

    def test_negative_budget(self):
        assert cpu4kit.main(["run", "--hex", "F0", "--max-steps", "-1"]) == cpu4kit.EXIT_ERROR

    def test_event_callback_detached_on_error(self):
        emu = CPU4Emulator()
        emu.load_program([0xF0])
        with pytest.raises(ValueError):
            cpu4kit._execute(emu, -1, trace=False)
        assert emu.on_event is None

    def test_log_file(self, tmp_path, capsys):
        log_path = tmp_path / "logs" / "run.log"
        rc = cpu4kit.main(["--log-file", str(log_path), "run", "--hex", "15 F0"])
        assert rc == 0
        text = log_path.read_text(encoding="utf-8")
        assert "CPU halted" in text


class TestOtherCommands:

    def test_demo_all(self, capsys):
        assert cpu4kit.main(["demo"]) == 0
        out = capsys.readouterr().out
        assert "===== 4-Bit CPU Simulator =====" in out
        assert "=== Basic Addition ===" in out
        assert "=== Countdown Loop ===" in out
        assert "=== Memory Operations ===" in out
        assert out.count("Max steps reached!") == 1

    def test_demo_one(self, capsys):
        assert cpu4kit.main(["demo", "shift"]) == 0
        out = capsys.readouterr().out
        assert "=== Shift and Rotate ===" in out
        assert "Basic Addition" not in out

    def test_demo_unknown_name(self):
        with pytest.raises(SystemExit):
            cpu4kit.main(["demo", "nope"])

    def test_list(self, capsys):
        assert cpu4kit.main(["list"]) == 0
        out = capsys.readouterr().out
        assert "countdown" in out
        assert "15 B0 D0 81 71 F0" in out

    def test_dump_truncates(self, capsys):
        program = " ".join(["00"] * 15 + ["F0", "AA", "BB"])
        assert cpu4kit.main(["dump", "--hex", program]) == 0
        out = capsys.readouterr().out
        assert "Loaded 16 of 18 bytes" in out
        assert "f:0xf0" in out
        assert "0xaa" not in out

    def test_no_command_prints_help(self, capsys):
        assert cpu4kit.main([]) == 0
        assert "usage:" in capsys.readouterr().out
