"""Console UI for tiempo application."""

from core.config import LANGUAGE, DIFFICULTIES, SCORING_MODES

HELP_TEXT = (
    'Commands: "new" for a new draw, "prompt" for the judge prompt, "history" for past attempts,\n'
    '          "mode <cloud|ollama|offline>", "difficulty <easy|standard|wild>", "exit" to quit'
)


class ConsoleUI:
    """Console user interface for tiempo application."""

    def __init__(self, client, mode: str = None, ollama_url: str = None, ollama_model: str = None):
        self.client = client
        self.mode = mode
        self.ollama_url = ollama_url
        self.ollama_model = ollama_model

    def print_draw(self, round_data: dict):
        """Print the cards of the current draw."""
        draw = round_data['draw']
        print('\n' + '=' * 50)
        print(f'DRAW ({round_data["difficulty"]}, scoring: {self.mode or round_data["mode"]})')
        print('=' * 50)
        print(f'  Subject:   {draw["subject"]}')
        print(f'  Verb:      {draw["verb"]}')
        print(f'  Tense:     {draw["tense"]}')
        print(f'  Time cue:  {draw["timeCue"]}')
        print(f'  Special:   {draw["special"]}')
        print('=' * 50)

    def print_result(self, outcome: dict, sentence: str):
        """Print scoring results."""
        result = outcome['result']
        print('-' * 40)
        print(f'Your sentence: {sentence}')
        if outcome.get('warning'):
            print(f'Warning: {outcome["warning"]}')
        print(f'Score: {result["score"]:g}/{result["max"]} ({result["source"]})')
        for note in result['notes']:
            print(f'  {note}' if note else '')
        if result.get('corrected'):
            print(f'Corrected: {result["corrected"]}')
        print('-' * 40)

    def print_history(self, history: dict):
        """Print past attempts, newest first."""
        entries = history['entries']
        if not entries:
            print('No attempts yet.')
            return
        print(f'\nLast {len(entries)} of {history["total"]} attempts:')
        for entry in entries:
            result = entry['result']
            draw = entry['draw']
            print(f'  [{result["score"]:g}/{result["max"]}] {entry["sentence"]}'
                  f'  ({draw["tense"]}, {draw["timeCue"]}, {draw["special"]})')

    def handle_command(self, user_input: str) -> bool:
        """Run a console command. Returns True if the input was a command."""
        command, _, arg = user_input.strip().partition(' ')
        command = command.lower()
        arg = arg.strip().lower()

        if command == 'new':
            self.print_draw(self.client.new_draw())
        elif command == 'prompt':
            print('\n' + self.client.get_judge_prompt(arg)['prompt'] + '\n')
        elif command == 'history':
            self.print_history(self.client.get_history())
        elif command == 'mode' and arg in SCORING_MODES:
            self.mode = arg
            print(f'Scoring mode: {arg}')
        elif command == 'difficulty' and arg in DIFFICULTIES:
            self.print_draw(self.client.new_draw(arg))
        elif command == 'help':
            print(HELP_TEXT)
        else:
            return False
        return True

    def run(self):
        """Run the main application loop."""
        try:
            health = self.client.health_check()
            print(f"Connected to tiempo server ({health['service']})")
        except Exception as e:
            print(f"Error: Cannot connect to server at {self.client.base_url} ({e})")
            print("Make sure the server is running: python run_server.py")
            return

        print(f'\nStarting {LANGUAGE} tense practice!')
        print(HELP_TEXT + '\n')
        self.print_draw(self.client.get_round())

        while True:
            user_input = input('==> ').strip()

            if user_input.lower() == 'exit':
                print('Goodbye!')
                return
            if not user_input:
                continue

            try:
                if self.handle_command(user_input):
                    continue
            except Exception as e:
                print(f"Error: {e}")
                continue

            print('Scoring...')
            try:
                outcome = self.client.submit_attempt(
                    user_input, self.mode, self.ollama_url, self.ollama_model
                )
                self.print_result(outcome, user_input)
            except Exception as e:
                print(f"Error submitting sentence: {e}")
