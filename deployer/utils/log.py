from colorama import Fore, Style


def h1(msg):
    print(
        f"\n\n{Fore.CYAN}-------------------------------------------------------------------------")
    print(f"{Fore.CYAN}{msg}{Style.RESET_ALL}\n")


def h2(msg):
    print(f"\n{Fore.LIGHTBLUE_EX}▸ {msg}{Style.RESET_ALL}\n")


def h3(msg):
    print(f"\t{Fore.GREEN}{msg}{Style.RESET_ALL}")


def warn(msg):
    print(f"\t{Fore.YELLOW}{msg}{Style.RESET_ALL}")


def error(msg):
    print(f"{Fore.RED}{msg}{Style.RESET_ALL}")


def info(msg):
    print(msg)


def short(value):
    # shortens addresses and hashes for single line output
    text = str(value)
    if text.startswith("0x") and len(text) > 14:
        return f"{text[:8]}…{text[-4:]}"
    return text
