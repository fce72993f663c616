from amorce.main import main

main()
