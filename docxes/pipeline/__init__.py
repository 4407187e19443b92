"""Content pipeline: parsing, heading extraction, compilation and plugins."""

from .compiler import MarkdownCompiler, compile_markdown
from .models import ParsedDocument, ProcessedMetadata, ProcessedOutput
from .parser import FrontmatterError, parse_document
from .plugins import HookStage, Plugin, PluginPipeline, load_plugin
from .processor import Processor, ProcessorStats
from .toc import derive_plain_text, extract_headings, heading_slug

__all__ = [
    "FrontmatterError",
    "HookStage",
    "MarkdownCompiler",
    "ParsedDocument",
    "Plugin",
    "PluginPipeline",
    "ProcessedMetadata",
    "ProcessedOutput",
    "Processor",
    "ProcessorStats",
    "compile_markdown",
    "derive_plain_text",
    "extract_headings",
    "heading_slug",
    "load_plugin",
    "parse_document",
]
