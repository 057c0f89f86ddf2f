"""
Tests for the command line entry point.
"""

import json
import logging
from unittest.mock import patch

import pytest

from porous_rve.cli import EXIT_INVALID, EXIT_OK, EXIT_WRITE_FAILED, main
from porous_rve.logging_config import setup_logging

FLAGS = ["--Lx", "1", "--Ly", "1", "--dx", "0.25", "--phi", "0.3", "--m", "2"]


def answers(*values):
    """input() replacement returning the given answers in order."""
    it = iter(values)

    def input_fn(prompt):
        try:
            return next(it)
        except StopIteration:
            raise EOFError from None
    return input_fn


class TestBatchMode:

    def test_flags(self, tmp_path):
        status = main(FLAGS + ["--out-dir", str(tmp_path), "--seed", "1"])
        assert status == EXIT_OK
        assert (tmp_path / "porosity_Lx1_phi30.vtk").exists()

    def test_quad_mesh(self, tmp_path):
        status = main(FLAGS + ["--out-dir", str(tmp_path), "--quad-mesh"])
        assert status == EXIT_OK
        assert (tmp_path / "rve_quad_mesh_Lx1.00_phi30.xdmf").exists()

    def test_config_file_with_override(self, tmp_path):
        config = tmp_path / "params.json"
        config.write_text(json.dumps({"Lx": 2.0, "Ly": 1.0, "dx": 0.5, "phi": 0.1, "m": 2.0}))
        out_dir = tmp_path / "out"

        status = main(["--config", str(config), "--phi", "0.5", "--out-dir", str(out_dir)])
        assert status == EXIT_OK
        assert (out_dir / "porosity_Lx2_phi50.vtk").exists()

    def test_same_seed_same_file(self, tmp_path):
        main(FLAGS + ["--out-dir", str(tmp_path / "a"), "--seed", "7"])
        main(FLAGS + ["--out-dir", str(tmp_path / "b"), "--seed", "7", "--workers", "2"])
        name = "porosity_Lx1_phi30.vtk"
        assert (tmp_path / "a" / name).read_bytes() == (tmp_path / "b" / name).read_bytes()

    @pytest.mark.parametrize("bad", [["--phi", "1.5"], ["--dx", "0"]])
    def test_invalid_parameters(self, tmp_path, caplog, bad):
        out_dir = tmp_path / "out"
        status = main(FLAGS + bad + ["--out-dir", str(out_dir)])
        assert status == EXIT_INVALID
        assert not out_dir.exists()
        assert "Invalid input parameters" in caplog.text

    def test_incomplete_flags(self, tmp_path, caplog):
        status = main(["--Lx", "1", "--out-dir", str(tmp_path / "out")])
        assert status == EXIT_INVALID
        assert "Missing parameters" in caplog.text

    def test_missing_config(self, tmp_path, caplog):
        status = main(["--config", str(tmp_path / "nope.json")])
        assert status == EXIT_INVALID
        assert "Cannot read parameter file" in caplog.text

    def test_write_failure(self, tmp_path, caplog):
        blocker = tmp_path / "blocked"
        blocker.write_text("")
        status = main(FLAGS + ["--out-dir", str(blocker)])
        assert status == EXIT_WRITE_FAILED
        assert "Could not write results" in caplog.text

    def test_open_calls_paraview(self, tmp_path):
        with patch("porous_rve.cli.open_in_paraview") as viewer:
            status = main(FLAGS + ["--out-dir", str(tmp_path), "--open"])
        assert status == EXIT_OK
        viewer.assert_called_once_with(tmp_path / "porosity_Lx1_phi30.vtk")

    def test_bad_workers(self):
        with pytest.raises(SystemExit) as exc_info:
            main(FLAGS + ["--workers", "0"])
        assert exc_info.value.code == 2

    def test_negative_seed(self, tmp_path, capsys):
        out_dir = tmp_path / "out"
        with pytest.raises(SystemExit) as exc_info:
            main(FLAGS + ["--seed", "-1", "--out-dir", str(out_dir)])
        assert exc_info.value.code == 2
        assert "--seed must be >= 0" in capsys.readouterr().err
        assert not out_dir.exists()

    def test_log_file_in_missing_directory(self, tmp_path, capsys):
        out_dir = tmp_path / "out"
        log_file = tmp_path / "nodir" / "run.log"
        with pytest.raises(SystemExit) as exc_info:
            main(FLAGS + ["--log-file", str(log_file), "--out-dir", str(out_dir)])
        assert exc_info.value.code == 2
        assert "cannot open log file" in capsys.readouterr().err
        assert not out_dir.exists()


class TestInteractiveMode:

    def test_single_run(self, tmp_path):
        input_fn = answers("1", "1", "1", "0", "2", "n", "n")
        status = main(["--out-dir", str(tmp_path)], input_fn=input_fn)
        assert status == EXIT_OK
        assert (tmp_path / "porosity_Lx1_phi0.vtk").exists()

    def test_invalid_then_valid(self, tmp_path, caplog):
        """A rejected parameter set does not end the session."""
        input_fn = answers(
            "1", "1", "0.5", "1.5", "2", "y",
            "1", "1", "0.5", "1", "2", "n", "n",
        )
        status = main(["--out-dir", str(tmp_path)], input_fn=input_fn)
        assert status == EXIT_OK
        assert "phi must lie in [0, 1]" in caplog.text
        assert (tmp_path / "porosity_Lx1_phi100.vtk").exists()

    def test_not_a_number(self, tmp_path, caplog):
        input_fn = answers("abc", "1", "1", "0.5", "2", "n")
        status = main(["--out-dir", str(tmp_path)], input_fn=input_fn)
        assert status == EXIT_INVALID
        assert "Lx must be a number" in caplog.text

    def test_visualize_answer(self, tmp_path):
        input_fn = answers("1", "1", "1", "0", "2", "y", "n")
        with patch("porous_rve.cli.open_in_paraview") as viewer:
            main(["--out-dir", str(tmp_path)], input_fn=input_fn)
        viewer.assert_called_once()

    def test_end_of_input(self, tmp_path):
        status = main(["--out-dir", str(tmp_path)], input_fn=answers())
        assert status == EXIT_OK


class TestLogging:

    def test_console_format(self, capsys):
        setup_logging(logging.INFO)
        logging.getLogger("porous_rve.test").info("Grid ready")
        assert "[INFO] Grid ready" in capsys.readouterr().out

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "run.log"
        setup_logging(logging.DEBUG, log_file=str(log_file))
        logging.getLogger("porous_rve.test").debug("details")
        logging.getLogger("porous_rve").handlers[-1].flush()
        assert "details" in log_file.read_text()

    def test_no_duplicate_handlers(self):
        setup_logging()
        setup_logging()
        assert len(logging.getLogger("porous_rve").handlers) == 1
