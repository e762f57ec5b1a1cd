"""
Console entry point
 - Single responsibility: Launch the interactive console
 - Imports and calls console.app.main()
"""
import sys
from console.app import main

if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
