from jjstack.cli.cli import main

main()
