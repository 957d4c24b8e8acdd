"""
Units converter for ODT image geometry.

Handles length parsing, conversion between centimetres, millimetres, inches,
points and pixels, and rendering lengths in the ``svg:width``/``svg:height``
attribute syntax.
"""

from typing import Dict, Optional, Tuple, Union
import logging
import re

logger = logging.getLogger(__name__)

# Fixed pixel-to-centimetre factor (one pixel is treated as one point).
PX_TO_CM = 0.0352778

LENGTH_PRECISION = 3

Length = Union[str, int, float]


def format_decimal(value: float, precision: int = LENGTH_PRECISION) -> str:
    """Render ``value`` with at most ``precision`` fractional digits, trailing zeros dropped."""
    text = f"{round(value, precision):.{precision}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("-0", ""):
        text = "0"
    return text


class UnitsConverter:
    """
    Converts between the physical length units accepted in image tokens.

    Centimetre is the canonical unit; unitless values are centimetres.
    """

    UNITS = ('cm', 'mm', 'in', 'pt', 'px')

    LENGTH_PATTERN = re.compile(
        r'^\s*(?P<number>[-+]?\d+(?:[.,]\d+)?|[-+]?[.,]\d+)\s*(?P<unit>cm|mm|in|pt|px)?\s*$',
        re.IGNORECASE
    )

    def __init__(self, px_to_cm: float = PX_TO_CM):
        """
        Initialize units converter.

        Args:
            px_to_cm: Centimetres per pixel
        """
        self.conversion_factors: Dict[str, float] = {
            'cm': 1.0,
            'mm': 0.1,
            'in': 2.54,
            'pt': PX_TO_CM,
            'px': px_to_cm,
        }

    def parse_length(self, value: Length) -> Tuple[float, str]:
        """
        Split a length expression into number and unit.

        Args:
            value: Length such as ``"4cm"``, ``"12.5 mm"``, ``"300px"`` or ``4``

        Returns:
            Tuple of (number, unit); unit defaults to ``cm``

        Raises:
            ValueError: If the expression is not a length
        """
        if isinstance(value, bool):
            raise ValueError(f"Invalid length: {value!r}")
        if isinstance(value, (int, float)):
            return float(value), 'cm'

        match = self.LENGTH_PATTERN.match(str(value))
        if not match:
            raise ValueError(f"Invalid length: {value!r}")

        number = float(match.group('number').replace(',', '.'))
        unit = (match.group('unit') or 'cm').lower()
        return number, unit

    def is_length(self, value: Length) -> bool:
        try:
            self.parse_length(value)
        except ValueError:
            return False
        return True

    def to_cm(self, value: Length) -> float:
        """
        Convert a length expression to centimetres.

        Args:
            value: Length expression

        Returns:
            Centimetres
        """
        number, unit = self.parse_length(value)
        result = number * self.conversion_factors[unit]
        logger.debug(f"Length to cm: {value!r} -> {result}")
        return result

    def from_cm(self, cm_value: float, unit: str) -> float:
        """
        Convert centimetres to another unit.

        Args:
            cm_value: Centimetres
            unit: Target unit

        Returns:
            Value in the target unit
        """
        unit = unit.lower()
        if unit not in self.conversion_factors:
            raise ValueError(f"Invalid target unit: {unit}")
        return cm_value / self.conversion_factors[unit]

    def convert(self, value: float, from_unit: str, to_unit: str) -> float:
        """
        Convert between any supported units.

        Args:
            value: Value to convert
            from_unit: Source unit
            to_unit: Target unit

        Returns:
            Converted value
        """
        from_unit = from_unit.lower()
        if from_unit not in self.conversion_factors:
            raise ValueError(f"Invalid source unit: {from_unit}")

        cm_value = value * self.conversion_factors[from_unit]
        result = self.from_cm(cm_value, to_unit)
        logger.debug(f"Unit conversion: {value} {from_unit} -> {result} {to_unit}")
        return result

    def pixels_to_cm(self, pixels: float) -> float:
        return pixels * self.conversion_factors['px']

    def format_cm(self, cm_value: float) -> str:
        """Render centimetres with the fixed precision and an explicit ``cm`` suffix."""
        return f"{format_decimal(cm_value)}cm"

    def to_odt_length(self, value: Optional[str]) -> Optional[str]:
        """
        Normalise a length expression into ODF length attribute syntax.

        Pixels are converted to centimetres; ``cm``, ``mm``, ``in`` and ``pt``
        pass through unchanged; unitless numbers get a ``cm`` suffix.
        Unparseable input is returned as given.

        Args:
            value: Length expression

        Returns:
            ODF length, or None for empty input
        """
        if value is None:
            return None
        text = str(value).strip().lower().replace(',', '.')
        if not text:
            return None

        try:
            number, unit = self.parse_length(text)
        except ValueError:
            logger.debug(f"Length passed through unparsed: {value!r}")
            return text

        if unit == 'px':
            return self.format_cm(self.pixels_to_cm(number))
        if text.endswith(unit):
            return f"{format_decimal(number, 6)}{unit}"
        return f"{format_decimal(number, 6)}cm"
