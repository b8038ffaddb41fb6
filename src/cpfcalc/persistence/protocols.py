"""Re-export persistence protocols from core for convenience."""

from __future__ import annotations

from cpfcalc.core.protocols import IRecordStore

__all__ = ["IRecordStore"]
