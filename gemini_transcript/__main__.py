"""Package entry point for ``python -m gemini_transcript``.

WHY: Users run the converter as ``python -m gemini_transcript transcribe
video.mp4`` without installing the console script.

HOW: Delegates to the CLI's main() function.
"""

from gemini_transcript.cli import main

if __name__ == "__main__":
    main()
