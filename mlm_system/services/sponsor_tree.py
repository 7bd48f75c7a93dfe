# mlm_system/services/sponsor_tree.py
"""
Read-only view over the member/upline relationship.
"""
from dataclasses import dataclass
from typing import List, Optional, Dict
from sqlalchemy.orm import Session
import logging

from models import Member
from mlm_system.config.mlm_config import StructureMode
from mlm_system.errors import CycleDetected

logger = logging.getLogger(__name__)

BINARY_SLOTS = ("left", "right")


@dataclass(frozen=True)
class ChildEntry:
    member: Member
    slot: Optional[str] = None


@dataclass(frozen=True)
class DownlineEntry:
    member: Member
    level: int


class SponsorTree:
    """Upline and downline lookups keyed by member id, guarded against cycles."""

    def __init__(self, session: Session):
        self.session = session

    def _getMember(self, memberId: int) -> Optional[Member]:
        return self.session.query(Member).filter_by(memberID=memberId).first()

    async def uplineChain(self, memberId: int, maxDepth: int) -> List[Member]:
        """
        Upline of `memberId`, nearest first, at most `maxDepth` members.

        The returned list is a snapshot of the tree at call time.
        Raises CycleDetected if the chain revisits a member.
        """
        chain: List[Member] = []
        member = self._getMember(memberId)
        if not member or maxDepth <= 0:
            return chain

        visited = [member.memberID]
        uplineId = member.uplineID

        while uplineId is not None and len(chain) < maxDepth:
            if uplineId in visited:
                path = visited + [uplineId]
                logger.error(f"Cycle in upline chain of member {memberId}: {path}")
                raise CycleDetected(memberId, path)

            upline = self._getMember(uplineId)
            if not upline:
                # Ссылка на несуществующего спонсора - цепочка заканчивается
                logger.warning(f"Member {visited[-1]} references missing upline {uplineId}")
                break

            chain.append(upline)
            visited.append(upline.memberID)
            uplineId = upline.uplineID

        return chain

    async def directChildren(self, memberId: int, structureMode: StructureMode) -> List[ChildEntry]:
        """
        Direct recruits of `memberId`.

        Binary mode returns at most the left and right slots, left first;
        unilevel returns every recruit ordered by id.
        """
        recruits = self.session.query(Member).filter(
            Member.uplineID == memberId
        ).order_by(Member.memberID).all()

        if structureMode == StructureMode.UNILEVEL:
            return [ChildEntry(member=recruit, slot=recruit.position) for recruit in recruits]

        bySlot: Dict[str, Member] = {}
        for recruit in recruits:
            if recruit.position in BINARY_SLOTS and recruit.position not in bySlot:
                bySlot[recruit.position] = recruit
            else:
                logger.warning(
                    f"Member {recruit.memberID} has no free binary slot under {memberId} "
                    f"(position={recruit.position})"
                )

        return [ChildEntry(member=bySlot[slot], slot=slot) for slot in BINARY_SLOTS if slot in bySlot]

    async def downlineByLevel(
            self,
            memberId: int,
            maxDepth: int,
            structureMode: StructureMode
    ) -> List[DownlineEntry]:
        """Breadth-first downline of `memberId` down to `maxDepth` levels."""
        result: List[DownlineEntry] = []
        visited = {memberId}
        frontier = [memberId]

        for level in range(1, maxDepth + 1):
            nextFrontier = []
            for parentId in frontier:
                for child in await self.directChildren(parentId, structureMode):
                    childId = child.member.memberID
                    if childId in visited:
                        raise CycleDetected(memberId, [parentId, childId])
                    visited.add(childId)
                    result.append(DownlineEntry(member=child.member, level=level))
                    nextFrontier.append(childId)

            if not nextFrontier:
                break
            frontier = nextFrontier

        return result
