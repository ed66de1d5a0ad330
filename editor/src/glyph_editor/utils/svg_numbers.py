"""Number formatting/parsing shared by the SVG writer and readers.

Numbers are written with Python's shortest round-tripping representation, so
a value read back with ``float()`` is bit-for-bit the value that was written.
"""

import math
import re
from decimal import Decimal, ROUND_HALF_DOWN, ROUND_HALF_UP
from typing import Optional

_LEADING_NUMBER = re.compile(r'^\s*([-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?)')


def format_number(value) -> str:
	"""Format a number for an SVG attribute.

	Integral values drop the trailing ``.0`` (``180`` not ``180.0``),
	negative zero is written as ``0``.
	"""
	value = float(value)
	if not math.isfinite(value):
		return '0'
	if value == 0:
		return '0'
	if value.is_integer() and abs(value) < 1e16:
		return str(int(value))
	return repr(value)


def parse_number(raw) -> Optional[float]:
	"""Parse a leading number from an attribute value (``'320px'`` -> 320.0).

	Returns None for missing, empty or non-finite values.
	"""
	if raw is None:
		return None
	match = _LEADING_NUMBER.match(str(raw))
	if not match:
		return None
	value = float(match.group(1))
	if not math.isfinite(value):
		return None
	return value


def parse_bool(raw) -> bool:
	"""Attribute booleans are the literal strings 'true'/'false'"""
	return str(raw).strip().lower() == 'true' if raw is not None else False


def format_bool(value: bool) -> str:
	return 'true' if value else 'false'


def round_half_up(value, decimals: int = 0) -> float:
	"""Round to ``decimals`` places with exact halves going towards +infinity.

	Works on the exact binary value, so ``1.125`` -> ``1.13`` and ``0.5`` -> ``1``
	while ``1.005`` (stored just below the half) -> ``1.0``.
	"""
	value = float(value)
	if not math.isfinite(value) or abs(value) >= 1e15:
		return value
	rounding = ROUND_HALF_UP if value >= 0 else ROUND_HALF_DOWN
	quantum = Decimal(1).scaleb(-decimals)
	return float(Decimal(value).quantize(quantum, rounding=rounding)) + 0.0
