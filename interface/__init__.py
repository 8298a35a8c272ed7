"""
Interface package: non-browser front ends for the game.

Modules:
    console - Line-oriented JSON protocol over stdin/stdout.
              Can be run as a standalone script: python interface/console.py
"""
