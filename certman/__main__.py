from certman.cli import run

run()
