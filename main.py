import sys
import os
import argparse
from pathlib import Path

from locforge_logger import get_logger
logger = get_logger("main")

import locforge_config as config
import locforge_settings as lf_settings
from locforge_ai import GeminiTranslator
from locforge_enums import ExportMode
from locforge_exceptions import LocForgeError
from controllers.file_controller import FileController
from controllers.translation_controller import TranslationController
from core.storage import JsonFileStore
from core.terminology import TerminologyManager
from core.text_utils import truncate

API_KEY_ENV = "GEMINI_API_KEY"


def _open_store(args):
    if getattr(args, 'settings', None):
        return JsonFileStore(args.settings)
    return lf_settings.open_default_store()


def _resolve_api_key(args, store):
    return args.api_key or os.environ.get(API_KEY_ENV) or lf_settings.load_api_key(store)


def _make_translator(api_key):
    return GeminiTranslator(api_key)


def _parse_ids(raw_ids):
    """Ren'Py ids are line numbers, RPG Maker ids are strings."""
    if not raw_ids:
        return None
    return [int(token) if token.isdigit() else token for token in raw_ids]


def _print_notifications(notifications):
    failed = False
    for note in notifications:
        marker = "ERROR" if note.is_error else "OK"
        print(f"[{marker}] {note.message}")
        failed = failed or note.is_error
    return failed


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_extract(args):
    controller = FileController()
    result = controller.load_paths(args.files)
    failed = _print_notifications(result.notifications)

    for parsed_file in result.files:
        print(f"\n== {parsed_file.filename} ({parsed_file.format.value}, {parsed_file.entry_count} entries)")
        for entry in parsed_file.entries:
            speaker = entry.speaker or "-"
            context = f"  <{entry.context}>" if entry.context else ""
            print(f"{str(entry.id):>28} | {entry.type.value:<9} | {speaker:<12} | {truncate(entry.original_text)}{context}")
    return 1 if failed else 0


def cmd_translate(args):
    store = _open_store(args)
    settings = lf_settings.load_settings(store)
    if args.chunk_size:
        settings[lf_settings.KEY_CHUNK_SIZE] = args.chunk_size
    if args.workers:
        settings[lf_settings.KEY_MAX_WORKERS] = args.workers

    api_key = _resolve_api_key(args, store)
    if not api_key:
        print(f"No API key. Pass --api-key, set {API_KEY_ENV}, or run 'locforge key <KEY>'.")
        return 2

    file_controller = FileController()
    result = file_controller.load_paths(args.files)
    failed = _print_notifications(result.notifications)

    translation_controller = TranslationController(
        _make_translator(api_key),
        settings=settings,
        terminology=TerminologyManager(store),
    )
    request = translation_controller.build_request(
        source_lang=args.source_lang,
        target_lang=args.lang,
        model=args.model,
        extra_context=args.context,
    )
    entry_ids = _parse_ids(args.ids)

    for parsed_file in result.files:
        notification = translation_controller.translate_file(parsed_file, entry_ids, request)
        failed = _print_notifications([notification]) or failed

        output_dir = args.out or Path(args.files[0]).resolve().parent
        try:
            target = file_controller.write_export(parsed_file, output_dir, args.mode)
            print(f"Wrote {target}")
        except LocForgeError as e:
            logger.error(str(e))
            print(f"[ERROR] {e.message}")
            failed = True

    return 1 if failed else 0


def cmd_text(args):
    store = _open_store(args)
    api_key = _resolve_api_key(args, store)
    if not api_key:
        print(f"No API key. Pass --api-key, set {API_KEY_ENV}, or run 'locforge key <KEY>'.")
        return 2

    text = args.text if args.text is not None else sys.stdin.read()
    controller = TranslationController(
        _make_translator(api_key),
        settings=lf_settings.load_settings(store),
        terminology=TerminologyManager(store),
    )
    request = controller.build_request(
        source_lang=args.source_lang,
        target_lang=args.lang,
        model=args.model,
        extra_context=args.context,
    )
    translated, notification = controller.translate_text(text, request)
    failed = _print_notifications([notification])
    if translated is not None:
        print(translated)
    return 1 if failed else 0


def cmd_export(args):
    controller = FileController()
    result = controller.load_paths(args.files)
    failed = _print_notifications(result.notifications)
    for parsed_file in result.files:
        output_dir = args.out or Path(args.files[0]).resolve().parent
        try:
            target = controller.write_export(parsed_file, output_dir, args.mode)
            print(f"Wrote {target}")
        except LocForgeError as e:
            logger.error(str(e))
            print(f"[ERROR] {e.message}")
            failed = True
    return 1 if failed else 0


def cmd_key(args):
    store = _open_store(args)
    status = lf_settings.save_api_key(store, args.key)
    print(f"API key {status}.")
    return 0


def cmd_terms(args):
    manager = TerminologyManager(_open_store(args))

    if args.action == 'list':
        for keyword in manager.keywords:
            print(f"keyword  {keyword.id}  [{'x' if keyword.enabled else ' '}]  {keyword.value}")
        for noun in manager.proper_nouns:
            print(f"noun     {noun.id}  [{'x' if noun.enabled else ' '}]  {noun.source} -> {noun.translation}")
        for rule in manager.rules:
            print(f"rule     {rule.id}  [{'x' if rule.enabled else ' '}]  {rule.text}")
        return 0

    if args.action == 'add-keyword':
        item = manager.add_keyword(' '.join(args.values))
    elif args.action == 'add-noun':
        if len(args.values) != 2:
            print("add-noun needs SOURCE and TRANSLATION")
            return 2
        item = manager.add_proper_noun(*args.values)
    elif args.action == 'add-rule':
        item = manager.add_rule(' '.join(args.values))
    elif args.action == 'toggle':
        enabled = manager.toggle(args.values[0]) if args.values else None
        if enabled is None:
            print("No such item")
            return 1
        print("enabled" if enabled else "disabled")
        return 0
    else:
        removed = manager.remove(args.values[0]) if args.values else False
        print("removed" if removed else "No such item")
        return 0 if removed else 1

    if item is None:
        print("Nothing added (empty or duplicate)")
        return 1
    print(f"Added {item.id}")
    return 0


# =============================================================================
# ARGUMENT PARSER
# =============================================================================

def build_parser():
    parser = argparse.ArgumentParser(
        prog="locforge",
        description="Extract, translate (Google Gemini) and rebuild Ren'Py and RPG Maker MZ game text.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {config.VERSION}")
    parser.add_argument("--settings", help="Settings JSON file (default: ~/.locforge/settings.json).")
    sub = parser.add_subparsers(dest="command", required=True)

    p_extract = sub.add_parser("extract", help="List the translatable entries of files.")
    p_extract.add_argument("files", nargs="+", help=".rpy/.txt scripts or RPG Maker .json files (MapInfos.json is used for map names).")
    p_extract.set_defaults(func=cmd_extract)

    p_translate = sub.add_parser("translate", help="Translate files and write the result.")
    p_translate.add_argument("files", nargs="+")
    p_translate.add_argument("--ids", nargs="*", help="Only translate these entry ids.")
    p_translate.add_argument("-tl", "--lang", default=None, help="Target language (default from settings).")
    p_translate.add_argument("-sl", "--source-lang", default=None, help="Source language, or 'auto'.")
    p_translate.add_argument("--model", default=None, help="Name of Google Gemini model.")
    p_translate.add_argument("--context", default=None, help="Free-text context passed to the model.")
    p_translate.add_argument("--chunk-size", type=int, default=None, help="Entries per request.")
    p_translate.add_argument("--workers", type=int, default=None, help="Parallel requests.")
    p_translate.add_argument("--api-key", default=None, help=f"Gemini API key (or set {API_KEY_ENV}).")
    p_translate.add_argument("--mode", choices=[m.value for m in ExportMode], default=None,
                             help="Output mode (rewrite/tl for Ren'Py, json for RPG Maker).")
    p_translate.add_argument("--out", default=None, help="Output directory (default: next to the input).")
    p_translate.set_defaults(func=cmd_translate)

    p_text = sub.add_parser("text", help="Translate a piece of text (argument or stdin).")
    p_text.add_argument("text", nargs="?", default=None, help="Text to translate (read from stdin when omitted).")
    p_text.add_argument("-tl", "--lang", default=None, help="Target language (default from settings).")
    p_text.add_argument("-sl", "--source-lang", default=None, help="Source language, or 'auto'.")
    p_text.add_argument("--model", default=None, help="Name of Google Gemini model.")
    p_text.add_argument("--context", default=None, help="Free-text context passed to the model.")
    p_text.add_argument("--api-key", default=None, help=f"Gemini API key (or set {API_KEY_ENV}).")
    p_text.set_defaults(func=cmd_text)

    p_export = sub.add_parser("export", help="Export extracted entries without translating.")
    p_export.add_argument("files", nargs="+")
    p_export.add_argument("--mode", choices=[m.value for m in ExportMode], default=None)
    p_export.add_argument("--out", default=None)
    p_export.set_defaults(func=cmd_export)

    p_key = sub.add_parser("key", help="Store the Gemini API key (no value removes it).")
    p_key.add_argument("key", nargs="?", default=None)
    p_key.set_defaults(func=cmd_key)

    p_terms = sub.add_parser("terms", help="Manage keywords, proper nouns and contextual rules.")
    p_terms.add_argument("action", choices=["list", "add-keyword", "add-noun", "add-rule", "toggle", "remove"])
    p_terms.add_argument("values", nargs="*")
    p_terms.set_defaults(func=cmd_terms)

    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logger.debug(f"Command: {args.command}")
    try:
        return args.func(args)
    except LocForgeError as e:
        logger.critical(f"{type(e).__name__}: {e}")
        print(f"[ERROR] {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
