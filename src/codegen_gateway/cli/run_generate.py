"""One-shot code generation from the command line, without the HTTP service."""
from __future__ import annotations
import argparse
import asyncio
import logging
import sys
import time

from codegen_gateway.common.logging_setup import setup_logging
from codegen_gateway.common.schema import DEFAULT_LANGUAGE, DEFAULT_MODEL
from codegen_gateway.common.settings import load_settings
from codegen_gateway.dispatch.dispatcher import Dispatcher
from codegen_gateway.dispatch.errors import GenerationError, classify
from codegen_gateway.dispatch.registry import build_registry
from codegen_gateway.dispatch.validator import validate

LOGGER = logging.getLogger("codegen.cli")

def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Generate code with a hosted model")
    ap.add_argument("--prompt", required=True, help="What the code should do")
    ap.add_argument("--language", default=DEFAULT_LANGUAGE)
    ap.add_argument("--model", default=DEFAULT_MODEL)
    ap.add_argument("--config", default=None, help="YAML config path")
    args = ap.parse_args(argv)

    settings = load_settings(cfg_path=args.config)
    setup_logging(settings.log_level)
    dispatcher = Dispatcher(build_registry(settings), timeout_s=settings.timeout_s, params=settings.params)

    start = time.time()
    try:
        job = validate({"prompt": args.prompt, "language": args.language, "model": args.model})
        result = asyncio.run(dispatcher.generate(job))
    except GenerationError as e:
        failure = classify(e, model=args.model)
        LOGGER.error("%s: %s", failure.kind.value, failure.message)
        return 1 if failure.http_status >= 500 else 2

    LOGGER.info("Latency: %sms", int((time.time() - start) * 1000))
    print(result.code)
    return 0

if __name__ == "__main__":
    sys.exit(main())
