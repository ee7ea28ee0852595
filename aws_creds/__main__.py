# ABOUTME: Module entry point so the tool runs with python -m aws_creds
# ABOUTME: Delegates to the cleo application

from aws_creds.cli import main

if __name__ == "__main__":
    main()
