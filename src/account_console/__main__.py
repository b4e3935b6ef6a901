from account_console.cli import main


main()
