# tests/test_block.py
"""Tests for CodeBlock layout, transitions, and anchors."""

import re

import pytest

from codereel.block import BlockConfig, CodeBlock
from codereel.config import DIM_OPACITY
from codereel.coordinates import Point
from codereel.errors import InvalidColorError
from codereel.scene import Scene
from codereel.theme import INTELLIJ_DARK
from codereel.timeline import All, Timeline
from codereel.tokenizer import TokenType

CODE = """public User save(User user) {
    validate(user);
    audit.log("save");
    return repository.save(user);
}"""


def run(transition):
    return Timeline(fps=30).run(transition)


@pytest.fixture
def scene():
    return Scene()


@pytest.fixture
def block(scene):
    block = CodeBlock.from_code(CODE, BlockConfig(x=100, y=50, font_size=20))
    block.mount(scene)
    return block


class TestLayout:
    """Initial layout from font metrics."""

    def test_lines_are_centred(self):
        block = CodeBlock.from_code(CODE, BlockConfig(font_size=20))
        assert [layout.local_y for layout in block.line_layouts()] == [-60, -30, 0, 30, 60]

    def test_fixed_height_is_top_aligned(self):
        """A fixed card height different from the content height aligns lines to the top."""
        block = CodeBlock.from_code(CODE, BlockConfig(font_size=20, height=400))
        assert block.line_layouts()[0].local_y == pytest.approx(-165)
        assert block.line_layouts()[1].local_y == pytest.approx(-135)

    def test_tokens_start_at_content_left(self):
        block = CodeBlock.from_code(CODE, BlockConfig(font_size=20, width=600))
        tokens = block.line_layouts()[0].tokens
        assert tokens[0].local_x == pytest.approx(-260)
        assert tokens[1].local_x == pytest.approx(-260 + 6 * 12)
        assert tokens[0].type is TokenType.KEYWORD

    def test_custom_line_height(self):
        block = CodeBlock.from_code("a\nb", BlockConfig(font_size=20, line_height=40))
        assert [layout.local_y for layout in block.line_layouts()] == [-20, 20]

    def test_custom_types_are_highlighted(self):
        block = CodeBlock.from_code("User u;", BlockConfig(custom_types=("User",)))
        assert block.line_layouts()[0].tokens[0].type is TokenType.TYPE


class TestMount:
    """Creating render-state records."""

    def test_mount_creates_nodes(self, scene, block):
        state = block.line_state(0)
        assert block.is_mounted
        assert state.node is not None
        assert len(state.token_nodes) == len(state.layout.tokens)
        assert scene[block.container].opacity == 0

    def test_mount_twice_is_noop(self, scene, block):
        size = len(scene)
        block.mount(scene)
        assert len(scene) == size

    def test_mount_places_block_in_world_space(self, scene):
        """The configured x, y is a world position even under a scaled parent."""
        parent = scene.create_group(x=-200, y=0)
        scene.set(parent, "scale", 2)
        block = CodeBlock.from_code(CODE, BlockConfig(x=100, y=50))
        block.mount(scene, parent)
        assert block.position.x == pytest.approx(100)
        assert block.position.y == pytest.approx(50)
        assert block.scale == 2

    def test_appear_and_disappear(self, scene, block):
        run(block.appear(0.2))
        assert scene[block.container].opacity == 1
        run(block.disappear(0.2))
        assert scene[block.container].opacity == 0

    def test_token_colors_follow_theme(self, block):
        assert block.token_colors(0)[0] == INTELLIJ_DARK.keyword

    def test_unmounted_transitions_complete_at_once(self):
        block = CodeBlock.from_code(CODE)
        assert run(block.appear()) == 1
        assert run(block.highlight_lines([(0, 1)])) == 1
        assert block.line_state(3).opacity == DIM_OPACITY


class TestAnchors:
    """World anchors and token lookup."""

    def test_anchor_composes_position_and_local_y(self, block):
        assert block.get_anchor(0) == Point(100, -10)
        assert block.get_anchor(4) == Point(100, 110)

    def test_anchor_index_is_clamped(self, block):
        assert block.get_anchor(-3) == block.get_anchor(0)
        assert block.get_anchor(99) == block.get_anchor(4)

    def test_anchor_follows_scale(self, scene, block):
        run(block.scale_to(2, 0.1))
        assert block.get_anchor(0) == Point(100, 50 - 120)

    def test_anchor_reflects_in_flight_move(self, block):
        """Anchors are recomputed from the live position mid-animation."""
        move = block.move_to(0, 0, 1.0)
        move.advance(0.5)
        anchor = block.get_anchor(2)
        assert 0 < anchor.x < 100
        assert anchor.x == pytest.approx(block.position.x)

    def test_anchor_after_shift(self, block):
        """Shifting lines moves anchors at and after the start by exactly delta."""
        before = [block.get_anchor(i) for i in range(5)]
        run(block.shift_lines(2, 45))
        after = [block.get_anchor(i) for i in range(5)]
        for i in range(5):
            expected = 45 if i >= 2 else 0
            assert after[i].x == pytest.approx(before[i].x)
            assert after[i].y - before[i].y == pytest.approx(expected)

    def test_shift_is_recorded_when_requested(self, block):
        """The new local y is visible to anchors before the tween runs."""
        before = block.get_anchor(3)
        block.shift_lines(3, -30)
        assert block.get_anchor(3).y == pytest.approx(before.y - 30)

    def test_find_token_centre(self, block):
        anchor = block.find_token(3, "save")
        assert anchor is not None
        assert anchor.x == pytest.approx(100 - 260 + 22 * 12 + 24)
        assert anchor.y == pytest.approx(block.get_anchor(3).y)
        assert anchor.width == pytest.approx(48)

    def test_find_token_matches_by_containment(self, block):
        """A substring inside a larger token is found, not only whole words."""
        anchor = block.find_token(3, "pos")
        assert anchor is not None
        assert anchor.x == pytest.approx(100 - 260 + 10 * 12 + 3 * 12 + 18)

    def test_find_token_misses_return_none(self, block):
        assert block.find_token(3, "missing") is None
        assert block.find_token(42, "save") is None
        assert block.find_token(0, "") is None


class TestLineState:
    """Opacity and color transitions."""

    def test_highlight_lines_with_overlapping_ranges(self, block):
        run(block.highlight_lines([(0, 1), (1, 2)]))
        assert [block.line_opacity(i) for i in range(5)] == [1, 1, 1, DIM_OPACITY, DIM_OPACITY]

    def test_dim_lines_is_clamped(self, block):
        run(block.dim_lines(3, 99, 0.5))
        assert [block.line_opacity(i) for i in range(5)] == [1, 1, 1, 0.5, 0.5]

    def test_dim_lines_out_of_range_is_noop(self, block):
        run(block.dim_lines(10, 20, 0.1))
        assert all(block.line_opacity(i) == 1 for i in range(5))

    def test_last_request_wins(self, block):
        """Overlapping opacity requests resolve to the last one issued."""
        run(All(block.highlight_lines([(0, 0)]), block.dim_lines(0, 4, 0.5)))
        assert all(block.line_opacity(i) == 0.5 for i in range(5))

    def test_hide_and_show(self, block):
        run(block.hide_lines([(1, 2)]))
        assert block.line_opacity(1) == 0
        assert block.line_state(1).hidden
        assert not block.line_state(0).hidden
        run(block.show_all())
        assert all(block.line_opacity(i) == 1 for i in range(5))
        assert not block.line_state(1).hidden

    def test_recolor_tokens_matches_patterns(self, block):
        run(block.recolor_tokens(3, ["save", "user"], "#FF0000"))
        colors = block.token_colors(3)
        tokens = block.line_state(3).layout.tokens
        for token, color in zip(tokens, colors):
            if "save" in token.text or "user" in token.text:
                assert color.lower() == "#ff0000"
            else:
                assert color == INTELLIJ_DARK.color_for(token.type)

    def test_recolor_line_and_reset(self, block):
        run(block.recolor_line(1, "#00FF00"))
        assert all(c.lower() == "#00ff00" for c in block.token_colors(1))
        run(block.reset_line_colors(1))
        tokens = block.line_state(1).layout.tokens
        assert block.token_colors(1) == [INTELLIJ_DARK.color_for(t.type) for t in tokens]

    def test_recolor_out_of_range_is_noop(self, block):
        assert run(block.recolor_line(9, "#00FF00")) == 1
        assert block.token_colors(9) == []

    def test_recolor_with_short_hex(self, block):
        run(block.recolor_line(1, "#fff"))
        assert block.token_colors(1) == ["#ffffff"] * len(block.line_state(1).layout.tokens)
        assert block.line_state(1).colors == block.token_colors(1)

    def test_recolor_with_color_name(self, block):
        """Named colors resolve to hex before the tween starts."""
        transition = block.recolor_tokens(3, ["save"], "white")
        run(transition)
        tokens = block.line_state(3).layout.tokens
        colors = block.token_colors(3)
        for token, color in zip(tokens, colors):
            if "save" in token.text:
                assert re.fullmatch(r"#[0-9a-f]{6}", color)
                assert color != INTELLIJ_DARK.color_for(token.type)

    def test_recolor_rejects_unparsable_color(self, block):
        """A bad color fails when the recolor is requested, before any state changes."""
        before = list(block.token_colors(1))
        with pytest.raises(InvalidColorError):
            block.recolor_line(1, "not-a-color")
        assert block.line_state(1).colors == before
        assert block.token_colors(1) == before

    def test_set_tokens_opacity(self, scene, block):
        run(block.set_tokens_opacity(1, ["validate"], 0.0))
        state = block.line_state(1)
        opacities = [scene[h].opacity for h in state.token_nodes]
        assert opacities[1] == 0.0
        assert opacities[0] == 1.0

    def test_insert_lines_reopens_a_gap(self, block):
        before = [block.get_anchor(i).y for i in range(5)]
        run(block.hide_lines([(1, 2)]))
        run(block.shift_lines(3, -60))
        run(block.insert_lines(1, 2))
        assert [block.get_anchor(i).y for i in range(5)] == pytest.approx(before)
        assert block.line_opacity(1) == 1


class TestDerivedBlocks:
    """extract, clone, and line ghosts."""

    def test_extract_sits_on_source_anchor(self, scene, block):
        """The extracted block's first line lands on the source line."""
        extracted = block.extract(1, 3)
        extracted.mount(scene)
        assert extracted.line_count == 3
        assert extracted.document.get_line(0) == block.document.get_line(1)
        assert extracted.get_anchor(0) == block.get_anchor(1)
        assert extracted.get_anchor(2) == block.get_anchor(3)

    def test_extract_is_independent(self, scene, block):
        """Changing the extracted block never touches the source, and vice versa."""
        extracted = block.extract(1, 3)
        extracted.mount(scene)
        run(extracted.dim_all(0.1))
        run(extracted.recolor_line(0, "#FF0000"))
        assert block.line_opacity(1) == 1
        assert block.token_colors(1) == [INTELLIJ_DARK.color_for(t.type) for t in block.line_state(1).layout.tokens]

        run(block.hide_lines([(1, 3)]))
        assert extracted.line_opacity(0) == pytest.approx(0.1)

    def test_extract_range_is_clamped(self, block):
        extracted = block.extract(3, 99)
        assert extracted.document.lines == block.document.slice(3, 4).lines

    def test_clone_uses_current_position(self, scene, block):
        run(block.move_to(-300, 20, 0.2))
        clone = block.clone()
        assert clone.document == block.document
        assert clone.config.x == pytest.approx(-300)
        assert clone.config.y == pytest.approx(20)
        assert not clone.is_mounted

    def test_line_ghost_is_a_detached_snapshot(self, scene, block):
        run(block.recolor_line(2, "#123456"))
        ghost = block.build_line_ghost(2)
        assert ghost is not None
        assert ghost.origin_world == block.get_anchor(2)
        assert not scene.is_attached(ghost.node)
        fills = {scene[h].fill.lower() for h in scene[ghost.node].children}
        assert fills == {"#123456"}

    def test_line_ghost_misses(self, block):
        assert block.build_line_ghost(17) is None
        assert CodeBlock.from_code(CODE).build_line_ghost(0) is None
