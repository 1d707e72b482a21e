from yeelink.cli import main

main()
