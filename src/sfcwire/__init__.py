try:
    from ._version import __version__
except ImportError:
    from importlib.metadata import version, PackageNotFoundError

    try:
        __version__ = version("sfcwire")
    except PackageNotFoundError:
        __version__ = "unknown"

from sfcwire.config import CompilerOptions
from sfcwire.compiler.exceptions import (
    CodeGenError,
    DuplicateKeyError,
    MalformedSourceError,
    ResolutionOrderError,
    SFCCompileError,
    TemplateSyntaxError,
)
from sfcwire.compiler.splitter import split
from sfcwire.compiler.parser import TemplateParser
from sfcwire.compiler.codegen.template import TemplateCodegen
from sfcwire.compiler.preprocessor import StylePreprocessorRegistry, StyleResult
from sfcwire.ids import VirtualModuleId
from sfcwire.resolver import ModuleResolver

__all__ = [
    "CompilerOptions",
    "ModuleResolver",
    "VirtualModuleId",
    "StylePreprocessorRegistry",
    "StyleResult",
    "TemplateParser",
    "TemplateCodegen",
    "split",
    "SFCCompileError",
    "MalformedSourceError",
    "TemplateSyntaxError",
    "DuplicateKeyError",
    "CodeGenError",
    "ResolutionOrderError",
]
