from poop.main import main


main()
