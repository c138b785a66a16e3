"""Bin scan service"""

from dataclasses import dataclass
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy import select
import uuid

from rewardbin.models import Bin, Material, RewardRule, Store
from rewardbin.core.exceptions import InvalidStateException, NotFoundException


@dataclass
class ScanResult:
    bin: Bin
    material: Material
    store: Store
    reward_rule: Optional[RewardRule]
    instruction: str


def build_instruction(material: Material, store: Store, reward_rule: Optional[RewardRule]) -> str:
    """Human readable prompt shown before the user drops items in"""
    text = f"You are about to recycle {material.name} at {store.name}."
    if reward_rule is None:
        return f"{text} No points available for this material."
    return f"{text} You will earn {reward_rule.point} points per {reward_rule.unit:g} {reward_rule.unit_type}."


class BinScanService:
    """Resolve a scanned bin into what the user is about to recycle"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def load_active_bin(self, bin_id: uuid.UUID) -> Bin:
        """
        Load a bin with material, reward rule, store and organization

        Raises:
            NotFoundException: Unknown bin
            InvalidStateException: Bin or its store is inactive
        """
        result = await self.db.execute(
            select(Bin)
            .options(
                selectinload(Bin.material).selectinload(Material.reward_rule),
                selectinload(Bin.store).selectinload(Store.organization),
            )
            .where(Bin.id == bin_id)
        )
        recycle_bin = result.scalar_one_or_none()

        if not recycle_bin:
            raise NotFoundException("Bin not found")
        if not recycle_bin.is_active:
            raise InvalidStateException("Bin is not active")
        if not recycle_bin.store.is_active:
            raise InvalidStateException("Store is not active")

        return recycle_bin

    async def scan(self, bin_id: uuid.UUID) -> ScanResult:
        """Read only; repeated scans return the same result"""
        recycle_bin = await self.load_active_bin(bin_id)
        reward_rule = recycle_bin.material.reward_rule

        return ScanResult(
            bin=recycle_bin,
            material=recycle_bin.material,
            store=recycle_bin.store,
            reward_rule=reward_rule,
            instruction=build_instruction(recycle_bin.material, recycle_bin.store, reward_rule),
        )
