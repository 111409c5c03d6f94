"""Source file discovery."""

from scan.files import SourceFile, find_source_files, module_name_for

__all__ = ["SourceFile", "find_source_files", "module_name_for"]
