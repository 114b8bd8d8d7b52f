#!/usr/bin/env python3
"""
Thin entrypoint that delegates to oroswap_bot.main.run().
Prompts, client setup, cycles and retries all live under oroswap_bot/.
"""

from oroswap_bot.main import run


if __name__ == "__main__":
    run()
