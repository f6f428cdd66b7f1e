"""
Word list for passphrase generation.

Short, common, unambiguous English words. Each word adds
log2(len(WORDLIST)) bits to a passphrase.
"""

_WORDS = """
able acid acorn actor adapt agent alarm album alert alien alley almond amber
amuse angle ankle apple april apron arena argue armor arrow atlas attic audio
autumn avoid awake badge bagel baker balmy bamboo banjo barn basil basin batch
beach beard bench berry bison blade blank blaze blend bloom blues board boost
booth brave bread brick bride brook brush bucket buddy bugle cabin cable cactus
camel candy canoe canyon cargo carol carve castle cedar chalk charm chess chief
chimp cider civic clamp clerk cliff clock cloud clown coach cobra cocoa comet
coral couch crane crisp crown crumb cubic curve cycle daisy dance dealer decoy
delta denim depot diary dingo disco diver dizzy dodge dolphin donut dough dozen
draft dragon drift drum eagle easel ebony echo eclair elbow elder ember empty
enjoy equal essay ethic exile fable fancy feast fence ferry fiber field fiesta
flame flask fleet flint flora flute focus foggy forge fossil fox frame fresh
frost fudge gadget galaxy gamma garlic gauge gecko ghost giant ginger glade
glass globe glove goose gorge grain grape gravy green grove guard guava guide
habit hammer happy harbor hazel heart hedge heron hinge hippo hobby honey hotel
husky igloo image inbox index ivory jacket jaguar jelly jewel jiffy joker jolly
judge juice jumbo jungle kayak kebab kettle kiosk kitten knack koala label
ladder lagoon lemon lever lilac linen llama lobby lodge lotus lunar lyric mango
maple marble market marsh medal melon mercy metal meter mimic minty mocha model
moose motor muffin mural music nacho napkin navel nectar needle noble noodle
north novel nutmeg oasis ocean olive omega onion opera orbit orchid otter oven
oxide paddle panda paper parade pastel peach pearl pebble pecan pedal pencil
pepper piano pickle pilot pixel plaza plum poem polar pony poppy porch potato
prism pulse pumpkin puppy quail quartz query quest quiet quilt quota rabbit
radar radio raft rainy raven razor relic rhino ribbon ridge rival robin rocket
rodeo royal ruby rumba saddle salad salsa sandal satin sauna scarf scout sepia
shadow shark shelf shrub sierra silk siren sketch skunk slate sloth smile snack
sonic spice spoon sprout squid stamp steam stove straw sugar summit sunny swamp
swift syrup table tango tapir teapot tempo thorn tiger timber toast topaz torch
tower trail trout tulip tundra turtle tuxedo ultra umbra uncle union urban
valid valve vapor velvet venom verse vessel vigor vinyl viola violet visor
vivid vocal waffle wagon walnut walrus waltz wharf wheat whisk willow window
wizard wombat yacht yeast yodel yogurt zebra zesty zipper zodiac
"""

WORDLIST = tuple(_WORDS.split())
