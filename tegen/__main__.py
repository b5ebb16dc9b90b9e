from tegen.cli import main

main()
