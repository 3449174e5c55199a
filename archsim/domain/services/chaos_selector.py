"""
Chaos Target Selector

Picks the nodes a chaos round will fail.
"""

from __future__ import annotations
import logging
import random
from typing import Iterable, List, Optional

from archsim.domain.models.graph import DiagramNode


class ChaosTargetSelector:
    """
    Randomized, constrained node sampler.

    Eligible nodes (architecture, not protected, not already failed) are
    shuffled and each one gets a Bernoulli trial with the configured
    probability until max_count is reached. If every trial fails, the
    first shuffled candidate is taken anyway so a round never does
    nothing under a low probability.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.logger = logging.getLogger(__name__)
        self._rng = rng or random.Random()

    def select(
        self,
        nodes: Iterable[DiagramNode],
        probability: float,
        max_count: int,
        protected_ids: Iterable[str] = (),
        already_failed_ids: Iterable[str] = (),
    ) -> List[str]:
        """
        Select up to max_count node ids to fail.

        Args:
            nodes: Candidate nodes (non-architecture nodes are skipped)
            probability: Success probability of each trial, in [0, 1]
            max_count: Upper bound on the number of selected ids
            protected_ids: Ids that must never be selected
            already_failed_ids: Ids that are failed already

        Returns:
            Selected node ids in selection order
        """
        excluded = set(protected_ids) | set(already_failed_ids)
        eligible = [n.id for n in nodes if n.is_architecture and n.id not in excluded]

        if not eligible or max_count <= 0:
            return []

        self._rng.shuffle(eligible)

        selected: List[str] = []
        for node_id in eligible:
            if len(selected) >= max_count:
                break
            if self._rng.random() < probability:
                selected.append(node_id)

        if not selected:
            selected.append(eligible[0])

        self.logger.debug(f"Chaos selected {selected} from {len(eligible)} eligible nodes")
        return selected
