# tests/test_ghosts.py
"""Tests for line ghosts."""

import pytest

from codereel.block import BlockConfig, CodeBlock
from codereel.coordinates import Point
from codereel.ghosts import (
    build_line_ghosts,
    fade_in_ghosts,
    fade_out_ghosts,
    fly_ghosts_to,
    mount_ghosts,
)
from codereel.scene import ROOT, Scene
from codereel.timeline import Timeline


def run(transition):
    return Timeline(fps=30).run(transition)


@pytest.fixture
def scene():
    return Scene()


@pytest.fixture
def blocks(scene):
    long_block = CodeBlock.from_code("a();\nb();\nc();", BlockConfig(x=-300, y=0))
    short_block = CodeBlock.from_code("x();", BlockConfig(x=300, y=100))
    for block in (long_block, short_block):
        block.mount(scene)
    return long_block, short_block


class TestBuildLineGhosts:
    def test_skips_blocks_without_the_line(self, blocks):
        ghosts = build_line_ghosts(blocks, 2)
        assert len(ghosts) == 1
        assert ghosts[0].source is blocks[0]
        assert ghosts[0].line_index == 2
        assert ghosts[0].origin_world == blocks[0].get_anchor(2)

    def test_skips_unmounted_blocks(self, blocks):
        loose = CodeBlock.from_code("a();")
        assert len(build_line_ghosts([loose, *blocks], 0)) == 2

    def test_ghost_is_a_snapshot(self, blocks):
        """Moving the source afterwards does not move the ghost's origin."""
        ghost = build_line_ghosts(blocks, 0)[0]
        origin = ghost.origin_world
        run(blocks[0].move_to(0, 0, 0.2))
        assert ghost.origin_world == origin
        assert blocks[0].get_anchor(0) != origin


class TestGhostAnimations:
    def test_mount_at_origin(self, scene, blocks):
        parent = scene.create_group(x=50, y=50)
        scene.set(parent, "scale", 0.5)
        ghosts = build_line_ghosts(blocks, 0)
        mount_ghosts(scene, parent, ghosts, initial_opacity=0.3)
        for ghost in ghosts:
            assert scene.is_attached(ghost.node)
            assert scene.world_position(ghost.node).x == pytest.approx(ghost.origin_world.x)
            assert scene.world_position(ghost.node).y == pytest.approx(ghost.origin_world.y)
            assert scene[ghost.node].opacity == 0.3

    def test_fly_and_fade(self, scene, blocks):
        ghosts = build_line_ghosts(blocks, 0)
        mount_ghosts(scene, ROOT, ghosts)
        run(fade_in_ghosts(scene, ghosts))
        assert all(scene[g.node].opacity == 1 for g in ghosts)

        run(fly_ghosts_to(scene, ghosts, Point(10, -10)))
        for ghost in ghosts:
            assert scene.world_position(ghost.node) == Point(10, -10)

        run(fade_out_ghosts(scene, ghosts[:1]))
        assert scene[ghosts[0].node].opacity == 0
        assert scene[ghosts[1].node].opacity == 1

    def test_no_ghosts_is_instant(self, scene):
        assert run(fly_ghosts_to(scene, [], Point(0, 0))) == 1
