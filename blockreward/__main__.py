from .cli.reward import main

main()
