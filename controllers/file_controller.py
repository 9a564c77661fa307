# -*- coding: utf-8 -*-
"""
LocForge File Controller

Handles file-related business logic:
- Picking the parser that accepts an uploaded file
- Parsing it into entries (MapInfos.json goes to the side table)
- Removing files from the session
- Producing export payloads
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Tuple, Union

from locforge_enums import ExportMode, FileFormat
from locforge_exceptions import ExportError, FileOperationError, ParserError
from locforge_logger import get_logger
from core import renpy_writer, rpgmaker_exporter
from core.error_explainer import ErrorExplainer
from models.notification import Notification
from models.parsed_file import ParsedFile
from models.project_model import ProjectModel
from parser.base import ParserStrategy
from parser.renpy_parser import RenpyParser
from parser.rpgmaker_parser import RpgMakerParser, is_map_infos_file, parse_map_infos

logger = get_logger("controllers.file")


@dataclass
class LoadResult:
    files: List[ParsedFile] = field(default_factory=list)
    notifications: List[Notification] = field(default_factory=list)

    @property
    def errors(self) -> List[Notification]:
        return [n for n in self.notifications if n.is_error]


@dataclass
class ExportPayload:
    filename: str
    content: str
    mode: ExportMode


class FileController:
    """
    Controller for file operations.

    Responsibilities:
    - Parse uploaded files and add them to the project
    - Keep the MapInfos side table up to date
    - Build export payloads per file and mode

    Every load produces one Notification per file; a parse failure is
    reported and the file is not added.
    """

    def __init__(self, project_model: Optional[ProjectModel] = None):
        self._project = project_model or ProjectModel()
        logger.debug("FileController initialized")

    @property
    def project(self) -> ProjectModel:
        return self._project

    # =========================================================================
    # FILE LOADING
    # =========================================================================

    def load_files(self, sources: Iterable[Tuple[str, str]]) -> LoadResult:
        """
        Load a drop of files given as (filename, text) pairs.

        MapInfos.json is processed before everything else so map files in
        the same drop get their editor names.
        """
        sources = list(sources)
        result = LoadResult()

        for filename, content in sources:
            if is_map_infos_file(filename):
                result.notifications.append(self._load_map_infos(filename, content))

        for filename, content in sources:
            if is_map_infos_file(filename):
                continue
            parsed_file, notification = self.load_file(filename, content)
            result.notifications.append(notification)
            if parsed_file is not None:
                result.files.append(parsed_file)

        return result

    def load_paths(self, paths: Iterable[Union[str, Path]]) -> LoadResult:
        """Read files from disk and load them as one drop."""
        sources = []
        read_errors = []
        for path in paths:
            path = Path(path)
            try:
                sources.append((path.name, self._read_text(path)))
            except FileOperationError as e:
                logger.error(str(e))
                read_errors.append(Notification.error(f"Could not read file {path.name}"))

        result = self.load_files(sources)
        result.notifications = read_errors + result.notifications
        return result

    def select_parser(self, filename: str) -> Optional[ParserStrategy]:
        """First parser whose can_parse() accepts the file name."""
        for parser in (RenpyParser(), RpgMakerParser(filename, self._project.map_infos)):
            if parser.can_parse(filename):
                return parser
        return None

    def load_file(self, filename: str, content: str) -> Tuple[Optional[ParsedFile], Notification]:
        """Parse one file and add it to the project."""
        parser = self.select_parser(filename)
        if parser is None:
            logger.warning(f"Unsupported file type: {filename}")
            return None, Notification.error(f"Unsupported file type: {filename}")

        file_format = parser.file_format
        try:
            entries = parser.parse(content)
        except ParserError as e:
            explanation = ErrorExplainer.explain(e)
            logger.error(f"Failed to parse {filename}: {e}")
            return None, Notification.error(f"Error reading file {filename}: {explanation.message}")

        parsed_file = ParsedFile(filename, file_format, entries, raw_text=content)
        self._project.add_file(parsed_file)
        logger.info(f"Loaded {filename}: {len(entries)} entries ({file_format.value})")
        return parsed_file, Notification.success(
            f"Extracted {len(entries)} entries from {filename}", count=len(entries)
        )

    def _load_map_infos(self, filename: str, content: str) -> Notification:
        try:
            records = parse_map_infos(content, filename)
        except ParserError as e:
            logger.error(f"Failed to read {filename}: {e}")
            return Notification.error(f"Error reading {filename}")
        merged = self._project.merge_map_infos(records)
        return Notification.success(f"Loaded map tree information ({filename})", count=merged)

    @staticmethod
    def _read_text(path: Path) -> str:
        try:
            # utf-8-sig drops the BOM some editors write
            with path.open('r', encoding='utf-8-sig', newline='') as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise FileOperationError(f"Could not read {path}: {e}", file_path=str(path), operation='read') from e

    # =========================================================================
    # FILE REMOVAL
    # =========================================================================

    def remove_file(self, file_id: str) -> Notification:
        parsed_file = self._project.get_file(file_id)
        if parsed_file is None:
            return Notification.error("File not found")
        self._project.remove_file(file_id)
        return Notification.success(f"Removed {parsed_file.filename}", count=parsed_file.entry_count)

    # =========================================================================
    # EXPORT
    # =========================================================================

    def export(self, parsed_file: ParsedFile, mode: Optional[ExportMode] = None) -> ExportPayload:
        """
        Build the downloadable output for a file.

        Ren'Py supports 'rewrite' (default) and 'tl'; RPG Maker only 'json'.

        Raises:
            ExportError: Mode not available for the file's format
        """
        if mode is None:
            mode = ExportMode.REWRITE if parsed_file.format == FileFormat.RENPY else ExportMode.JSON
        mode = ExportMode(mode)

        if parsed_file.format == FileFormat.RENPY:
            if mode == ExportMode.REWRITE:
                content = renpy_writer.rebuild_script(parsed_file.lines, parsed_file.entries)
                return ExportPayload(renpy_writer.rewrite_filename(parsed_file.filename), content, mode)
            if mode == ExportMode.TRANSLATION_FILE:
                content = renpy_writer.build_translation_file(parsed_file.entries)
                return ExportPayload(renpy_writer.translation_filename(parsed_file.filename), content, mode)
        elif mode == ExportMode.JSON:
            content = rpgmaker_exporter.export_entries(parsed_file.entries)
            return ExportPayload(rpgmaker_exporter.export_filename(parsed_file.filename), content, mode)

        raise ExportError(
            f"Export mode '{mode.value}' is not available for {parsed_file.format.value} files",
            file_name=parsed_file.filename, mode=mode.value,
        )

    def write_export(self, parsed_file: ParsedFile, output_dir: Union[str, Path],
                     mode: Optional[ExportMode] = None) -> Path:
        payload = self.export(parsed_file, mode)
        target = Path(output_dir) / payload.filename
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with target.open('w', encoding='utf-8', newline='') as f:
                f.write(payload.content)
        except OSError as e:
            raise FileOperationError(f"Could not write {target}: {e}", file_path=str(target), operation='write') from e
        logger.info(f"Exported {parsed_file.filename} -> {target}")
        return target
