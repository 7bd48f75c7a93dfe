"""Unit tests for SponsorTree lookups on a small in-memory tree."""

import pytest

from mlm_system.config.mlm_config import StructureMode
from mlm_system.errors import CycleDetected
from mlm_system.services.sponsor_tree import SponsorTree


class TestUplineChain:

    @pytest.mark.asyncio
    async def test_nearest_first(self, session, make_chain):
        root, middle, leaf = make_chain(3)

        chain = await SponsorTree(session).uplineChain(leaf.memberID, maxDepth=10)

        assert [m.memberID for m in chain] == [middle.memberID, root.memberID]

    @pytest.mark.asyncio
    async def test_depth_bound(self, session, make_chain):
        members = make_chain(8)
        leaf = members[-1]

        chain = await SponsorTree(session).uplineChain(leaf.memberID, maxDepth=3)

        assert len(chain) == 3
        assert [m.memberID for m in chain] == [m.memberID for m in reversed(members[4:7])]

    @pytest.mark.asyncio
    async def test_root_has_empty_chain(self, session, make_member):
        root = make_member()

        assert await SponsorTree(session).uplineChain(root.memberID, maxDepth=5) == []

    @pytest.mark.asyncio
    async def test_unknown_member(self, session):
        assert await SponsorTree(session).uplineChain(999, maxDepth=5) == []

    @pytest.mark.asyncio
    async def test_cycle_detected(self, session, make_member):
        first = make_member()
        second = make_member(upline=first)
        leaf = make_member(upline=second)

        # Повреждаем дерево: first -> second -> first
        first.uplineID = second.memberID
        session.commit()

        with pytest.raises(CycleDetected) as excinfo:
            await SponsorTree(session).uplineChain(leaf.memberID, maxDepth=10)

        assert excinfo.value.memberId == leaf.memberID
        assert excinfo.value.path[-1] == second.memberID


class TestDirectChildren:

    @pytest.mark.asyncio
    async def test_binary_left_first(self, session, make_member):
        sponsor = make_member()
        right = make_member(upline=sponsor, position="right")
        left = make_member(upline=sponsor, position="left")

        children = await SponsorTree(session).directChildren(sponsor.memberID, StructureMode.BINARY)

        assert [(c.slot, c.member.memberID) for c in children] == [
            ("left", left.memberID),
            ("right", right.memberID),
        ]

    @pytest.mark.asyncio
    async def test_binary_ignores_unplaced_recruits(self, session, make_member):
        sponsor = make_member()
        left = make_member(upline=sponsor, position="left")
        make_member(upline=sponsor)

        children = await SponsorTree(session).directChildren(sponsor.memberID, StructureMode.BINARY)

        assert [c.member.memberID for c in children] == [left.memberID]

    @pytest.mark.asyncio
    async def test_unilevel_returns_all(self, session, make_member):
        sponsor = make_member()
        recruits = [make_member(upline=sponsor) for _ in range(4)]

        children = await SponsorTree(session).directChildren(sponsor.memberID, StructureMode.UNILEVEL)

        assert [c.member.memberID for c in children] == [r.memberID for r in recruits]


@pytest.mark.asyncio
async def test_downline_by_level(session, make_member):
    root = make_member()
    a = make_member(upline=root)
    b = make_member(upline=root)
    c = make_member(upline=a)
    d = make_member(upline=c)

    tree = SponsorTree(session)
    downline = await tree.downlineByLevel(root.memberID, maxDepth=2, structureMode=StructureMode.UNILEVEL)

    assert [(e.member.memberID, e.level) for e in downline] == [
        (a.memberID, 1),
        (b.memberID, 1),
        (c.memberID, 2),
    ]
    assert d.memberID not in [e.member.memberID for e in downline]
