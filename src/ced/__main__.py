from ced.cli import main

main()
