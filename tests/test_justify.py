import pytest

from coverpage.layout.fonts import FontHandle
from coverpage.layout.justify import justify, place_line


def _span(placements, font, size):
    word, x = placements[-1]
    return x + font.width(word, size) - placements[0][1]


@pytest.mark.parametrize(
    "line",
    [
        "two words",
        "The quick brown fox jumps over the lazy dog",
        "growth trade policy rural credit markets households India growth trade",
    ],
)
def test_justified_line_fills_target_width(line):
    font = FontHandle("helv")
    placements = justify(line, font, 11, 540, left=50)

    assert [w for w, _ in placements] == line.split()
    assert placements[0][1] == 50
    assert _span(placements, font, 11) == pytest.approx(540, abs=0.01)


def test_gap_sum_invariant(mono_font):
    line = "alpha beta gamma delta"
    placements = justify(line, mono_font, 10, 400)
    words = line.split()
    word_widths = sum(mono_font.width(w, 10) for w in words)
    gaps = [
        placements[i + 1][1] - (placements[i][1] + mono_font.width(words[i], 10))
        for i in range(len(words) - 1)
    ]
    assert all(g == pytest.approx(gaps[0]) for g in gaps)
    assert word_widths + sum(gaps) == pytest.approx(400, abs=0.01)


def test_single_word_is_not_justified(mono_font):
    assert justify("alone", mono_font, 10, 400, left=50) == [("alone", 50)]


def test_last_line_keeps_natural_spacing(mono_font):
    assert place_line("the end of it", mono_font, 10, 400, left=50, last=True) == [
        ("the end of it", 50)
    ]


def test_place_line_justifies_inner_lines(mono_font):
    placements = place_line("the end of it", mono_font, 10, 400, left=50, last=False)
    assert len(placements) == 4
    assert _span(placements, mono_font, 10) == pytest.approx(400)


def test_word_widths_are_measured_during_placement(mono_font):
    justify("a b c", mono_font, 10, 100)
    # once each for the natural width and once each while placing
    assert mono_font.calls.count("a") == 2
