"""Allow running the batch client with: python -m tts_batch"""

from tts_batch.runner import cli

if __name__ == "__main__":
    cli()
