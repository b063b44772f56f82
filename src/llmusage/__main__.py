from llmusage import main

main()
