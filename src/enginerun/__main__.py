from enginerun.cli import main

main()
