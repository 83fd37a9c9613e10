# ------------------------------------------------------------------------ #
#      o-o      o                o                                         #
#     /         |                |                                         #
#    O     o  o O-o  o-o o-o     |  oo o--o o-o o-o                        #
#     \    |  | |  | |-' |   \   o | | |  |  /   /                         #
#      o-o o--O o-o  o-o o    o-o  o-o-o--O o-o o-o                        #
#             |                           |                                #
#          o--o                        o--o                                #
#                        o--o      o         o                             #
#                        |   |     |         |  o                          #
#                        O-Oo  o-o O-o  o-o -o-    o-o o-o                 #
#                        |  \  | | |  | | |  |  | |     \                  #
#                        o   o o-o o-o  o-o  o  |  o-o o-o                 #
#                                                                          #
#    Jemison High School - Huntsville Alabama                              #
# ------------------------------------------------------------------------ #

import logging
from typing import Optional

logger = logging.getLogger(__name__)


class MaxMinCounter:
    """
    Running min / max / average of a measured quantity (vision latency, for example)
    """

    def __init__(self, name: str, units: str = "", scale: float = 1, precision: int = 0):
        self.name = name
        self.units = units
        self.scale = scale
        self.precision: int = precision
        self.count: int = 0

        self.max: Optional[float] = None
        self.min: Optional[float] = None
        self.total: Optional[float] = None

    def clear(self) -> None:
        self.max = None
        self.min = None
        self.total = None
        self.count = 0

    def add(self, value: float) -> None:
        if self.count:
            self.total += value
            self.count += 1
            self.max = max(value, self.max)
            self.min = min(value, self.min)
        else:
            self.count = 1
            self.total = self.max = self.min = value

    @property
    def average(self) -> Optional[float]:
        return self.total / self.count if self.count else None

    def _scaled(self, value: float) -> float:
        value *= self.scale
        if self.precision:
            value = round(value, self.precision)
        return value

    def report(self) -> None:
        if self.count == 0:
            logger.info(f"{self.name}: No statistics available")
            return

        logger.info(f"{self.name}: min {self._scaled(self.min)} {self.units}, "
                    f"max {self._scaled(self.max)} {self.units}, "
                    f"avg {self._scaled(self.average)} {self.units} over {self.count} samples")
