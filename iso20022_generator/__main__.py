from iso20022_generator.cli import main

main()
