"""Built-in rejection reasons served by the API."""

REJECTION_REASONS = (
    "My pet parrot doesn't approve of you",
    "I promised my Netflix account I'd stay loyal",
    "I'm secretly training to be a ninja",
    "Aliens told me you're not the chosen one",
    "I can't date anyone taller than my Wi-Fi router",
    "I'm married to my job… literally, we had a ceremony",
    "I only date people who can juggle flaming swords",
    "My horoscope said I should avoid you",
    "I'm saving myself for pizza",
    "I'm allergic to people born in your month",
    "I'm in a committed relationship with my bed",
    "I can't risk you finding out I'm Batman",
    "My therapist said I should only date imaginary friends",
    "I'm waiting for Hogwarts to send me a letter",
    "I swore an oath to never date until I beat Dark Souls",
    "I only date people who can moonwalk",
    "I'm too busy teaching my goldfish to swim",
    "My emotions are on vacation, so I'm unavailable",
    "I'm planning to travel back in time, relationships complicate that",
    "I might accidentally turn into a werewolf",
    "I'm still not over the ending of Game of Thrones",
    "We're too different — you like tea, I like coffee",
    "I'm focusing on my dream to become a professional napper",
    "I don't see this going anywhere… except maybe the circus",
    "My cat thinks it's a dog and needs therapy",
    "I'm already married to my PlayStation",
    "I only date people who can beat me at Mario Kart",
    "I'm allergic to commitment and peanuts",
    "I'm too busy binge-watching cooking shows I'll never try",
    "My imaginary friend gets jealous easily",
    "I'm saving myself for the next Marvel movie",
    "I'm secretly a vampire, and you're too sunny",
    "I only date people who can recite the alphabet backwards",
    "My dog said you're not cool enough",
    "I'm too busy trying to break a world record in napping",
    "I'm emotionally invested in my houseplants",
    "I'm waiting for Elon Musk to take me to Mars",
    "I'm allergic to people who don't like pineapple on pizza",
    "I'm too busy writing fanfiction about myself",
    "I'm in a complicated relationship with Wi-Fi",
    "I'm saving myself for tacos",
    "I'm too busy trying to teach my cat algebra",
    "I'm emotionally unavailable because my emotions are stuck in traffic",
    "I'm still recovering from losing in Uno",
    "I'm too busy practicing my evil laugh",
    "I'm waiting for my Hogwarts owl, can't commit until then",
    "I'm allergic to people who don't laugh at dad jokes",
    "I'm too busy building a pillow fort empire",
    "I'm emotionally drained from watching sad dog movies",
    "I'm saving myself for dessert",
    "I'm too busy trying to invent a new color",
    "I'm emotionally unavailable because my heart is on airplane mode",
    "I'm still recovering from losing my favorite pen",
    "I'm too busy training for the Olympics in procrastination",
    "I'm waiting for my spirit animal to approve",
    "I'm allergic to people who don't like memes",
    "I'm too busy trying to teach my fish to dance",
    "I'm emotionally unavailable because my feelings are on strike",
    "I'm still recovering from losing at Monopoly",
    "I'm too busy practicing my karaoke skills",
    "I'm saving myself for sushi",
    "I'm too busy trying to invent teleportation",
    "I'm emotionally unavailable because my heart is buffering",
    "I'm still recovering from losing my favorite sock",
    "I'm too busy training my hamster for a marathon",
    "I'm waiting for my horoscope to say yes",
    "I'm allergic to people who don't like chocolate",
    "I'm too busy trying to teach my dog to code",
    "I'm emotionally unavailable because my heart is on vacation",
    "I'm still recovering from losing at Scrabble",
    "I'm too busy practicing my moonwalk",
    "I'm saving myself for burgers",
    "I'm too busy trying to invent a new dance move",
    "I'm emotionally unavailable because my heart is in airplane mode",
    "I'm still recovering from losing my favorite hoodie",
    "I'm too busy training my turtle for a race",
    "I'm waiting for my fortune cookie to approve",
    "I'm allergic to people who don't like pizza",
    "I'm too busy trying to teach my parrot Shakespeare",
    "I'm emotionally unavailable because my heart is rebooting",
    "I'm still recovering from losing at chess",
    "I'm too busy practicing my juggling skills",
    "I'm saving myself for donuts",
    "I'm too busy trying to invent a new holiday",
    "I'm emotionally unavailable because my heart is in safe mode",
    "I'm still recovering from losing my favorite hat",
    "I'm too busy training my guinea pig for a talent show",
    "I'm waiting for my lucky number to appear",
    "I'm allergic to people who don't like ice cream",
    "I'm too busy trying to teach my cat yoga",
    "I'm emotionally unavailable because my heart is updating",
    "I'm still recovering from losing at poker",
    "I'm too busy practicing my breakdance",
    "I'm saving myself for pancakes",
    "I'm too busy trying to invent a new emoji",
    "I'm emotionally unavailable because my heart is charging",
    "I'm still recovering from losing my favorite book",
    "I'm too busy training my rabbit for a magic trick",
    "I'm waiting for my lucky star to shine",
    "I'm allergic to people who don't like fries",
)
