"""
Management command to run one of the medication tools from the shell.
"""
import json
from django.core.management.base import BaseCommand
from medtools.services import MedToolsService, TOOL_ALIASES


TOOL_CHOICES = ['lookup', 'altbrands', 'safety'] + list(TOOL_ALIASES.keys())


class Command(BaseCommand):
    help = 'Run a medication tool (lookup, altbrands, safety) against RxNorm and print the JSON result'

    def add_arguments(self, parser):
        parser.add_argument(
            'tool',
            type=str,
            choices=TOOL_CHOICES,
            help='Which tool to run'
        )
        parser.add_argument(
            'drug',
            type=str,
            help='Medication name as a user would type it, e.g. "Tylenol 500mg"'
        )

    def handle(self, *args, **options):
        tool = options['tool']
        drug = options['drug'].strip()

        if not drug:
            self.stdout.write(self.style.ERROR('A medication name is required'))
            return

        result = MedToolsService().run(tool, drug)

        if not result.matched:
            self.stderr.write(
                self.style.WARNING(f'No exact match found for "{drug}"')
            )

        self.stdout.write(json.dumps(result.to_dict(), indent=2))
