"""Token count → energy → emissions conversion.

A deliberately simple linear model::

    energy    = tokens * joules_per_token
    total    += energy
    emissions = total / 3_600_000 * grid_intensity   # J → kWh → g CO2

Emissions are recomputed from the cumulative energy on every accepted
flush rather than accumulated separately.
"""

from __future__ import annotations

import logging

from suggestion_meter.configs.system import EstimatorConfig

from .models import UsageEstimate, UsageTotals

logger = logging.getLogger(__name__)

JOULES_PER_KWH = 3_600_000


class UsageEstimator:
    """Converts token counts into energy and updates the session totals."""

    def __init__(self, config: EstimatorConfig, totals: UsageTotals) -> None:
        self.config = config
        self.totals = totals

    def estimate(self, token_count: int) -> UsageEstimate | None:
        """Account for one episode of ``token_count`` tokens.

        Returns ``None`` without touching the totals when the count is
        below ``min_tokens``.
        """
        if token_count < self.config.min_tokens:
            logger.debug(
                "Skipping episode: %d tokens < min_tokens=%d",
                token_count,
                self.config.min_tokens,
            )
            return None

        energy = token_count * self.config.joules_per_token
        total_energy = self.totals.total_energy_joules + energy
        total_emissions = (
            total_energy / JOULES_PER_KWH * self.config.grid_intensity_g_per_kwh
        )

        # Commit together so a flush never leaves half-updated totals.
        self.totals.total_energy_joules = total_energy
        self.totals.total_emissions_grams = total_emissions
        self.totals.episodes += 1

        digits = self.config.precision
        return UsageEstimate(
            token_count=token_count,
            energy_joules=round(energy, digits),
            total_energy_joules=round(total_energy, digits),
            total_emissions_grams=round(total_emissions, digits),
        )
