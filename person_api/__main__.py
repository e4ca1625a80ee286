from person_api.main import main

main()
