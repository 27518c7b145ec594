import logging
from pathlib import Path

from survey_service.config import get_config
from survey_service.ingestion import seed_surveys_from_directory


def main():
    """Seed surveys from the configured markdown directory."""
    config = get_config()
    logging.basicConfig(level=config.logging.level)

    markdown_dir = Path(config.ingestion.markdown_dir)
    print(f"Looking for markdown files in: {markdown_dir.resolve()}")

    report = seed_surveys_from_directory(markdown_dir)
    print(f"Seed completed: {report.summary()}")
    for outcome in report.outcomes:
        print(f"  - {outcome.title}: {outcome.action.value}")


if __name__ == "__main__":
    main()
