"""
Pluggable extraction strategies.

Each strategy turns raw CV text into ParsedCVData. FallbackChain tries them
in order and returns the first one that succeeds.
"""

from abc import ABC, abstractmethod
from typing import List, Sequence, Tuple, Type

from cv_intake.cv_pipeline.ai_parser import AIParser, RegexFallbackParser
from cv_intake.cv_pipeline.cv_analyzer import CVAnalyzer
from cv_intake.schemas.parsed_cv import ParsedCVData
from cv_intake.utils.logger import get_logger

logger = get_logger(__name__)


class ExtractionStrategy(ABC):
    """Abstract base class for text -> ParsedCVData strategies."""

    name: str = "strategy"

    @abstractmethod
    async def extract(self, raw_text: str) -> ParsedCVData:
        """
        Extract structured CV data from raw text.

        Args:
            raw_text: Text produced by the text extractor

        Raises:
            Any exception signals failure; FallbackChain decides whether to
            move on to the next strategy.
        """


class HeuristicStrategy(ExtractionStrategy):
    name = "heuristic"

    async def extract(self, raw_text: str) -> ParsedCVData:
        return CVAnalyzer(raw_text).parse()


class AIStrategy(ExtractionStrategy):
    name = "ai"

    def __init__(self, parser: AIParser):
        self.parser = parser

    async def extract(self, raw_text: str) -> ParsedCVData:
        return await self.parser.parse_with_ai(raw_text)


class RegexFallbackStrategy(ExtractionStrategy):
    name = "regex-fallback"

    async def extract(self, raw_text: str) -> ParsedCVData:
        return RegexFallbackParser(raw_text).parse()


class FallbackChain:
    """
    Ordered strategies; the first success wins.

    Only exceptions listed in `recoverable` move on to the next strategy,
    anything else propagates. The last strategy's failure always propagates.
    """

    def __init__(
        self,
        strategies: Sequence[ExtractionStrategy],
        recoverable: Tuple[Type[BaseException], ...] = (Exception,),
    ):
        if not strategies:
            raise ValueError("FallbackChain needs at least one strategy")
        self.strategies: List[ExtractionStrategy] = list(strategies)
        self.recoverable = recoverable

    async def run(self, raw_text: str) -> Tuple[str, ParsedCVData]:
        """Return (strategy name, data) from the first strategy that succeeds."""
        last = len(self.strategies) - 1
        for i, strategy in enumerate(self.strategies):
            try:
                data = await strategy.extract(raw_text)
            except self.recoverable as e:
                if i == last:
                    raise
                logger.warning(
                    "Strategy %s failed, falling back to %s: %s",
                    strategy.name,
                    self.strategies[i + 1].name,
                    e,
                )
                continue
            return strategy.name, data
        # unreachable: the loop either returns or re-raises on the last strategy
        raise RuntimeError("FallbackChain exhausted")

    async def extract(self, raw_text: str) -> ParsedCVData:
        _, data = await self.run(raw_text)
        return data
