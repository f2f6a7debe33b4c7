"""Allow running the bridge with ``python -m discord_embed_bridge``."""

from discord_embed_bridge.main import main

if __name__ == "__main__":
    main()
