"""
Segmentation and measurement selection on synthetic frames.
"""

import cv2
import numpy as np
import pytest

from sizer_inspection import Candidate, ContourSegmenter, Measurement, select_measurement

FRAME_WIDTH = 960


def frame_with_rects(*rects, width=FRAME_WIDTH, height=540):
    """Black frame with white filled rectangles given as (x, y, w, h)."""
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    for x, y, w, h in rects:
        cv2.rectangle(frame, (x, y), (x + w - 1, y + h - 1), (255, 255, 255), thickness=-1)
    return frame


# ─────────────────────────────────────────────────────────────────────────────
# select_measurement
# ─────────────────────────────────────────────────────────────────────────────

def test_no_candidates_means_empty_belt():
    measurement = select_measurement([], frame_width=FRAME_WIDTH)

    assert measurement == Measurement.empty()
    assert measurement.is_empty
    assert measurement.rect is None


def test_largest_qualifying_candidate_wins():
    small = Candidate(x=100, y=100, width=100, height=100)
    large = Candidate(x=400, y=100, width=150, height=200)

    measurement = select_measurement([small, large], frame_width=FRAME_WIDTH)

    assert measurement.area == 30000
    assert measurement.rect == large


def test_narrow_candidates_are_noise():
    # width must be strictly greater than 30
    at_limit = Candidate(x=100, y=100, width=30, height=900)
    just_over = Candidate(x=300, y=100, width=31, height=10)

    assert select_measurement([at_limit], frame_width=FRAME_WIDTH).is_empty
    assert select_measurement([at_limit, just_over], frame_width=FRAME_WIDTH).rect == just_over


@pytest.mark.parametrize("x, width", [
    (0, 200),        # touches left border
    (760, 200),      # right edge == frame width
    (800, 200),      # runs off the right side
])
def test_candidates_touching_frame_edges_are_rejected(x, width):
    candidate = Candidate(x=x, y=100, width=width, height=150)

    assert select_measurement([candidate], frame_width=FRAME_WIDTH).is_empty


def test_candidate_one_pixel_inside_both_edges_is_kept():
    candidate = Candidate(x=1, y=0, width=FRAME_WIDTH - 2, height=10)

    assert select_measurement([candidate], frame_width=FRAME_WIDTH).rect == candidate


def test_edge_candidate_does_not_hide_smaller_inside_candidate():
    cut_off = Candidate(x=0, y=0, width=400, height=400)
    inside = Candidate(x=500, y=100, width=100, height=100)

    assert select_measurement([cut_off, inside], frame_width=FRAME_WIDTH).rect == inside


def test_ties_keep_the_first_candidate():
    first = Candidate(x=100, y=100, width=100, height=200)
    second = Candidate(x=400, y=100, width=200, height=100)

    assert select_measurement([first, second], frame_width=FRAME_WIDTH).rect == first


def test_candidate_rejects_negative_dimensions():
    with pytest.raises(ValueError):
        Candidate(x=0, y=0, width=-1, height=10)


# ─────────────────────────────────────────────────────────────────────────────
# ContourSegmenter
# ─────────────────────────────────────────────────────────────────────────────

def test_segmenter_finds_white_rectangle():
    frame = frame_with_rects((300, 200, 200, 120))

    candidates = ContourSegmenter().segment(frame)

    assert len(candidates) == 1
    box = candidates[0]
    assert box.x == pytest.approx(300, abs=2)
    assert box.y == pytest.approx(200, abs=2)
    assert box.width == pytest.approx(200, abs=3)
    assert box.height == pytest.approx(120, abs=3)


def test_segmenter_on_empty_frame_returns_nothing():
    assert ContourSegmenter().segment(frame_with_rects()) == []


def test_segmenter_accepts_grayscale_frames():
    gray = cv2.cvtColor(frame_with_rects((300, 200, 200, 120)), cv2.COLOR_BGR2GRAY)

    assert len(ContourSegmenter().segment(gray)) == 1


def test_segmenter_ignores_dim_regions():
    frame = np.zeros((540, 960, 3), dtype=np.uint8)
    frame[200:320, 300:500] = 150  # below threshold

    assert ContourSegmenter().segment(frame) == []


def test_segmenter_never_returns_zero_area_boxes():
    frame = frame_with_rects((300, 200, 200, 120), (600, 100, 80, 80))

    candidates = ContourSegmenter().segment(frame)

    assert len(candidates) == 2
    assert all(c.area > 0 for c in candidates)


def test_segment_then_select_measures_inside_part():
    frame = frame_with_rects((0, 50, 150, 150), (400, 200, 160, 140))

    measurement = select_measurement(
        ContourSegmenter().segment(frame), frame_width=frame.shape[1]
    )

    assert measurement.rect.x == pytest.approx(400, abs=2)
    assert measurement.area == pytest.approx(160 * 140, rel=0.06)


def test_segmenter_is_deterministic():
    frame = frame_with_rects((300, 200, 200, 120))
    segmenter = ContourSegmenter()

    assert segmenter.segment(frame) == segmenter.segment(frame.copy())


@pytest.mark.parametrize("kwargs", [
    {"kernel_size": 4},
    {"kernel_size": 0},
    {"threshold": 256},
])
def test_segmenter_rejects_bad_parameters(kwargs):
    with pytest.raises(ValueError):
        ContourSegmenter(**kwargs)
