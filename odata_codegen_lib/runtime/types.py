"""
String-represented primitive types referenced by generated artifacts.

Values of these types travel as strings on the wire; the distinct types keep
them apart from free text in signatures and drive literal formatting.
"""

from typing import NewType

DateString = NewType("DateString", str)
TimeOfDayString = NewType("TimeOfDayString", str)
DateTimeString = NewType("DateTimeString", str)
DateTimeOffsetString = NewType("DateTimeOffsetString", str)
BinaryString = NewType("BinaryString", str)
GuidString = NewType("GuidString", str)
BigNumberString = NewType("BigNumberString", str)

__all__ = [
    "DateString",
    "TimeOfDayString",
    "DateTimeString",
    "DateTimeOffsetString",
    "BinaryString",
    "GuidString",
    "BigNumberString",
]
