# Mainnet addresses the v2 contracts are wired to on the fork.

DAI_ADDRESS = "0x6B175474E89094C44Da98b954EedeAC495271d0F"
STETH_ADDRESS = "0xae7ab96520DE3A18E5e111B5EaAb095312D7fE84"
SWAP_CONTROLLER = "0x551D5500F613a4beC77BA8B834b5eEd52ad5764f"

PRICE_FEED_ORACLE_ADDRESS = "0xcafea55b2d62399DcFe3DfA3CFc71E4076B14b71"
TWAP_ORACLE_ADDRESS = "0xcafea1C9f94e077DF44D95c4A1ad5a5747a18b5C"

# Largest PooledStaking stakers, moved into v2 staking pools right after the upgrade
TOP_STAKERS = [
    "0x1337DEF1FC06783D4b03CB8C1Bf3EBf7D0593FC4",
    "0x87B2a7559d85f4653f13E6546A14189cd5455d45",
    "0x4a9fA34da6d2378c8f3B9F6b83532B169beaEDFc",
    "0x46de0C6F149BE3885f28e54bb4d302Cb2C505bC2",
    "0xE1Ad30971b83c17E2A24c0334CB45f808AbEBc87",
    "0x5FAdEA9d64FFbe0b8A6799B8f0c72250F92E2B1d",
    "0x9c657DB2B697846BE13Ca0B2bB5a6D17f860a395",
    "0xF99b3a13d46A04735BF3828eB3030cfED5Ea0087",
    "0x8C878B8f805472C0b70eD66a71c0B33da3d233c8",
    "0x4544e2Fae244eA4Ca20d075bb760561Ce5990DC3",
]
