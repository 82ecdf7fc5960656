"""Style block preprocessing.

Preprocessors are external collaborators keyed by the block's ``lang``.
They may be plain functions or coroutines; either way they receive the
block content, the block and the component path, and return CSS text or a
``StyleResult``.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Union

from sfcwire.compiler.ast_nodes import Block

logger = logging.getLogger(__name__)


@dataclass
class StyleResult:
    code: str
    map: Optional[Dict[str, Any]] = None


PreprocessorReturn = Union[StyleResult, str]
Preprocessor = Callable[
    [str, Block, str], Union[PreprocessorReturn, Awaitable[PreprocessorReturn]]
]


def css_passthrough(content: str, block: Block, file_path: str) -> StyleResult:
    return StyleResult(code=content)


class StylePreprocessorRegistry:
    """Maps style languages to preprocessors. Plain CSS is built in."""

    DEFAULT_LANG = "css"

    def __init__(self) -> None:
        self._preprocessors: Dict[str, Preprocessor] = {self.DEFAULT_LANG: css_passthrough}

    def register(self, lang: str, preprocessor: Preprocessor) -> None:
        self._preprocessors[lang.lower()] = preprocessor

    def get(self, lang: Optional[str]) -> Optional[Preprocessor]:
        return self._preprocessors.get((lang or self.DEFAULT_LANG).lower())

    def __contains__(self, lang: str) -> bool:
        return lang.lower() in self._preprocessors

    async def process(
        self, content: str, block: Block, file_path: str
    ) -> Optional[StyleResult]:
        """Run the preprocessor for ``block.lang``.

        Returns ``None`` when no preprocessor is registered for the language,
        leaving the block to the bundler's own pipeline.
        """
        lang = block.lang or self.DEFAULT_LANG
        preprocessor = self.get(lang)
        if preprocessor is None:
            logger.debug("No style preprocessor for lang=%s in %s", lang, file_path)
            return None

        result = preprocessor(content, block, file_path)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, str):
            result = StyleResult(code=result)
        if not isinstance(result, StyleResult):
            raise TypeError(
                f"Style preprocessor for {lang!r} returned {type(result).__name__}"
            )
        return result
