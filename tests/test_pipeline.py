"""End-to-end tests for table extraction."""

import csv
import io
import json
import time

import cv2
import numpy as np
import pytest

from table_grid import (
    TableExtractor,
    extract_table_bytes,
    extract_table_image,
    extract_table_path,
)
from table_grid.config import Config, get_default_config
from table_grid.exceptions import DegenerateGridError, ImageLoadError, RecognitionError
from table_grid.pipeline import main
from table_grid.processors import Segment
from table_grid.recognition import Recognition, TesseractRecognizer


def test_pipeline_initialization():
    """Test extractor initialization."""
    extractor = TableExtractor()
    assert isinstance(extractor.config, Config)

    custom_config = get_default_config()
    custom_config.cells.inset = 2
    extractor = TableExtractor(custom_config)
    assert extractor.assembler.config.inset == 2


def test_detect_grid(ruled_table_image, ruled_table_cells):
    grid = TableExtractor().detect_grid(ruled_table_image)

    assert (grid.width, grid.height) == (100, 60)
    assert grid.vertical_lines == [
        Segment(5, 5, 56), Segment(50, 5, 56), Segment(50, 5, 56), Segment(95, 5, 56)
    ]
    assert grid.horizontal_lines == [
        Segment(5, 5, 96), Segment(30, 5, 96), Segment(30, 5, 96), Segment(55, 5, 96)
    ]
    assert grid.column_positions == [5, 50, 50, 95]
    assert grid.row_positions == [5, 30, 30, 55]
    assert grid.cells == ruled_table_cells
    assert grid.shape == [2, 2]


def test_extract_table(ruled_table_image, ruled_table_cells, recognizer):
    extraction = TableExtractor(recognizer=recognizer).extract_array(ruled_table_image)

    assert extraction.rows == [["r0c0", "r0c1"], ["r1c0", "r1c1"]]
    assert len(recognizer.images) == 1
    assert (recognizer.images[0] == ruled_table_image).all()
    assert recognizer.calls == [cell for row in ruled_table_cells for cell in row]
    assert extraction.readings[1][0].confidence == pytest.approx(90.0)


def test_thick_borders(table_factory, recognizer):
    image = table_factory(
        width=100, height=60,
        row_lines=[5, 30, 55], column_lines=[5, 50, 95],
        x_span=(5, 97), y_span=(5, 57), thickness=2,
    )

    grid = TableExtractor(recognizer=recognizer).detect_grid(image)

    # The pairs are (6, 30)/(31, 55) on rows and (6, 50)/(51, 95) on columns.
    assert grid.row_positions == [6, 30, 31, 55]
    assert grid.column_positions == [6, 50, 51, 95]
    assert [(cell.x, cell.y, cell.width, cell.height) for row in grid.cells for cell in row] == [
        (10, 10, 36, 16), (55, 10, 36, 16), (10, 35, 36, 16), (55, 35, 36, 16)
    ]


def test_shape_follows_line_pairs(table_factory, recognizer):
    image = table_factory(
        width=120, height=80,
        row_lines=[5, 25, 45, 70], column_lines=[5, 60, 110],
        x_span=(5, 111), y_span=(5, 71),
    )

    extraction = TableExtractor(recognizer=recognizer).extract_array(image)

    assert extraction.grid.shape == [2, 2, 2]
    assert len(extraction.rows) == 3


def test_shape_does_not_depend_on_recognizer(ruled_table_image, recognizer_factory):
    class ConstantRecognizer:
        def set_image(self, image):
            pass

        def recognize(self, rect):
            return Recognition("x", 0.0)

    scripted = TableExtractor(recognizer=recognizer_factory()).extract_array(ruled_table_image)
    constant = TableExtractor(recognizer=ConstantRecognizer()).extract_array(ruled_table_image)

    assert [len(row) for row in scripted.rows] == [len(row) for row in constant.rows]
    assert constant.rows == [["x", "x"], ["x", "x"]]


def test_frame_on_image_edge_is_not_detected(recognizer):
    # Runs that reach the image edge are never closed.
    image = np.full((60, 100), 255, dtype=np.uint8)
    image[0, :] = image[-1, :] = 0
    image[:, 0] = image[:, -1] = 0

    extraction = TableExtractor(recognizer=recognizer).extract_array(image)

    assert extraction.rows == []
    assert recognizer.calls == []


def test_blank_image(blank_image, recognizer):
    extraction = TableExtractor(recognizer=recognizer).extract_array(blank_image)

    assert extraction.rows == []
    assert extraction.grid.vertical_lines == []
    assert recognizer.images == []


def test_blank_image_can_fail(blank_image, recognizer, sample_config):
    sample_config.cells.fail_on_empty_grid = True

    with pytest.raises(DegenerateGridError):
        TableExtractor(sample_config, recognizer).extract_array(blank_image)


def test_recognition_failure_aborts(ruled_table_image, recognizer_factory):
    recognizer = recognizer_factory(fail_at=(1, 0))

    with pytest.raises(RecognitionError) as exc_info:
        TableExtractor(recognizer=recognizer).extract_array(ruled_table_image)

    assert exc_info.value.details["row"] == 1
    assert exc_info.value.details["column"] == 0


def test_workers_keep_cell_order(ruled_table_image, sample_config):
    class SlowFirstRecognizer:
        def set_image(self, image):
            pass

        def recognize(self, rect):
            if (rect.row, rect.column) == (0, 0):
                time.sleep(0.05)
            return Recognition(f"{rect.row}/{rect.column}", 50.0)

    sample_config.recognizer.workers = 4
    extraction = TableExtractor(sample_config, SlowFirstRecognizer()).extract_array(
        ruled_table_image
    )

    assert extraction.rows == [["0/0", "0/1"], ["1/0", "1/1"]]


def test_extract_image_from_bgr(ruled_table_image, recognizer):
    bgr = cv2.cvtColor(ruled_table_image, cv2.COLOR_GRAY2BGR)

    rows = extract_table_image(bgr, recognizer=recognizer)

    assert rows == [["r0c0", "r0c1"], ["r1c0", "r1c1"]]


def test_extract_bytes(ruled_table_image, recognizer):
    _, encoded = cv2.imencode(".png", ruled_table_image)

    assert extract_table_bytes(encoded.tobytes(), recognizer=recognizer) == [
        ["r0c0", "r0c1"], ["r1c0", "r1c1"]
    ]


def test_extract_bytes_rejects_garbage(recognizer):
    with pytest.raises(ImageLoadError):
        extract_table_bytes(b"garbage", recognizer=recognizer)


def test_extract_path(table_image_files, recognizer):
    rows = extract_table_path(table_image_files["page_001"], recognizer=recognizer)
    assert rows == [["r0c0", "r0c1"], ["r1c0", "r1c1"]]


def test_extract_directory_skips_failures(table_image_files, recognizer):
    input_dir = table_image_files["page_001"].parent
    (input_dir / "broken.png").write_bytes(b"not a png")

    results = TableExtractor(recognizer=recognizer).extract_directory(input_dir)

    assert sorted(path.name for path in results) == ["page_001.png", "page_002.png"]
    assert all(extraction.grid.shape == [2, 2] for extraction in results.values())


def test_extract_missing_directory(tmp_path):
    with pytest.raises(ValueError):
        TableExtractor().extract_directory(tmp_path / "missing")


def test_debug_overlay(tmp_path, ruled_table_image, recognizer, sample_config):
    sample_config.output.debug_dir = str(tmp_path / "debug")

    TableExtractor(sample_config, recognizer).extract_array(ruled_table_image, name="page")

    overlay = cv2.imread(str(tmp_path / "debug" / "page_grid.png"))
    assert overlay is not None
    assert overlay.shape == (60, 100, 3)


def test_output_formats(ruled_table_image, recognizer):
    extraction = TableExtractor(recognizer=recognizer).extract_array(ruled_table_image)

    assert list(csv.reader(io.StringIO(extraction.to_csv()))) == extraction.rows

    payload = json.loads(extraction.to_json())
    assert payload["rows"] == extraction.rows
    assert payload["columns"] == [5, 50, 50, 95]
    assert payload["cells"][1] == {
        "row": 0, "column": 1, "x": 54, "y": 9, "width": 37, "height": 17,
        "text": "r0c1", "confidence": 90.0,
    }


class TestCommandLine:
    """Test the table-grid command."""

    @pytest.fixture(autouse=True)
    def scripted_tesseract(self, monkeypatch, recognizer):
        monkeypatch.setattr(
            TesseractRecognizer, "from_config", classmethod(lambda cls, config, verify=True: recognizer)
        )

    def test_single_image_to_csv(self, table_image_files, tmp_path):
        output = tmp_path / "result.csv"

        assert main([str(table_image_files["page_001"]), "-o", str(output), "--quiet"]) == 0
        assert output.read_text(encoding="utf-8") == "r0c0,r0c1\nr1c0,r1c1\n"

    def test_directory_to_json(self, table_image_files, tmp_path):
        output_dir = tmp_path / "results"
        input_dir = table_image_files["page_001"].parent

        assert main([str(input_dir), "-o", str(output_dir), "--quiet"]) == 0

        payload = json.loads((output_dir / "page_002.json").read_text(encoding="utf-8"))
        assert payload["rows"] == [["r0c0", "r0c1"], ["r1c0", "r1c1"]]

    def test_prints_rows(self, table_image_files, capsys):
        assert main([str(table_image_files["page_001"]), "--quiet"]) == 0
        assert "['r0c0', 'r0c1']" in capsys.readouterr().out

    def test_missing_image(self, tmp_path):
        assert main([str(tmp_path / "missing.png"), "--quiet"]) == 1

    def test_invalid_config(self, tmp_path, table_image_files):
        config_path = tmp_path / "bad.json"
        config_path.write_text('{"grid": {"merge_gap": -1}}', encoding="utf-8")

        assert main([str(table_image_files["page_001"]), "-c", str(config_path)]) == 2
