from diaglog.cli import main

main()
