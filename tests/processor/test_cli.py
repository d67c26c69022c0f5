import numpy as np
import pytest

from slidem.processor import pipeline
from slidem.processor.cli import main, parse_arguments


@pytest.fixture
def oml_file(tmp_path):
    path = tmp_path / "oml"
    path.write_text("0 0 0 0\n0 0 0 0 0 0\n")
    return path


def test_defaults():
    args = parse_arguments(["in.csv", "out.npz"])
    assert args.input == "in.csv"
    assert not args.no_post_process
    assert args.fit_flag_mask == 0
    assert args.oml_params is None


def test_end_to_end(tmp_path, oml_file, make_day, northern_track):
    source = tmp_path / "day.csv"
    make_day(northern_track).to_dataframe().to_csv(source, index=False)
    output = tmp_path / "products.npz"

    status = main([str(source), str(output), "--oml-params", str(oml_file), "--fit-log"])

    assert status == 0
    with np.load(output) as archive:
        assert archive["mieff"].shape == (northern_track.size,)
    assert (tmp_path / "products.npz.fitlog").exists()


def test_missing_input_fails(tmp_path, oml_file):
    status = main([str(tmp_path / "absent.csv"), str(tmp_path / "out.npz"), "--oml-params", str(oml_file)])
    assert status == 1


def test_bad_oml_file_fails(tmp_path, make_day):
    source = tmp_path / "day.csv"
    make_day(np.array([30.0])).to_dataframe().to_csv(source, index=False)
    bad = tmp_path / "oml"
    bad.write_text("1 2 3")
    assert main([str(source), str(tmp_path / "out.npz"), "--oml-params", str(bad)]) == 1


def test_default_oml_file_fallback(tmp_path, monkeypatch, make_day):
    monkeypatch.setattr(pipeline.config, "MODIFIED_OML_CONFIG_FILE", tmp_path / "absent")
    source = tmp_path / "day.csv"
    make_day(np.array([30.0])).to_dataframe().to_csv(source, index=False)
    assert main([str(source), str(tmp_path / "out.npz"), "--no-post-process"]) == 0
