import argparse
import asyncio
import sys
from pathlib import Path

from walkthru.capturer import WalkthroughCapturer
from walkthru.config import WalkthroughConfig
from walkthru.exceptions import WalkthroughError
from walkthru.logger import logger
from walkthru.narrator import create_narrator
from walkthru.prompts import ask_feature, ask_role


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Automated UI walkthrough with screenshots and test-case docs")
    parser.add_argument("--role", type=str, help="Role to log in as (prompted if omitted)")
    parser.add_argument("--feature", type=str, help="Feature to navigate to (prompted if omitted)")
    parser.add_argument("--base-url", type=str, help="Landing page URL")
    parser.add_argument("--output", type=str, help="Root directory for test case folders")
    parser.add_argument("--headless", action="store_true", help="Run the browser without a window")
    parser.add_argument("--offline", action="store_true", help="Skip the LLM and use template narration")
    return parser.parse_args(argv)


async def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        config = WalkthroughConfig.from_env()
    except WalkthroughError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    if args.base_url:
        config.base_url = args.base_url
    if args.output:
        config.output_root = Path(args.output).resolve()
    if args.headless:
        config.headless = True

    role = args.role or ask_role(config.roles)
    feature = args.feature or ask_feature()

    narrator = create_narrator(
        config.openai_api_key, config.narration_model, config.narration_timeout_s, offline=args.offline
    )
    capturer = WalkthroughCapturer(config, narrator=narrator)
    try:
        await capturer.run(role, feature)
    except WalkthroughError as e:
        logger.error(f"Walkthrough failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
